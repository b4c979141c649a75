from django.conf import settings
from django.db import models

from cores.codes import generate_unique_code


class Candidate(models.Model):
    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"

    class ApplicationStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        UNDER_REVIEW = "under_review", "Under Review"
        TEST_ASSIGNED = "test_assigned", "Test Assigned"
        TESTED = "tested", "Tested"
        SELECTED = "selected", "Selected"
        REJECTED = "rejected", "Rejected"

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='candidate_profile')
    application_number = models.CharField(max_length=40, unique=True, blank=True)

    # Personal info
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10, choices=Gender.choices)
    nationality = models.CharField(max_length=100, blank=True)

    # Contact info
    primary_phone = models.CharField(max_length=20)
    secondary_phone = models.CharField(max_length=20, blank=True)

    application_status = models.CharField(max_length=20, choices=ApplicationStatus.choices, default=ApplicationStatus.PENDING)
    assigned_tests = models.ManyToManyField('catalog.Test', blank=True, related_name='assigned_candidates')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.application_number} ({self.user})"

    def save(self, *args, **kwargs):
        if not self.application_number:
            self.application_number = generate_unique_code("APP", Candidate, "application_number", suffix_length=4)
        super().save(*args, **kwargs)
