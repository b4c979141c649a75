# results/models.py
from django.db import models


class Result(models.Model):
    class Grade(models.TextChoices):
        A_PLUS = "A+", "A+"
        A = "A", "A"
        B = "B", "B"
        C = "C", "C"
        D = "D", "D"
        F = "F", "F"

    # One result per session; the unique constraint is what rejects a second derivation
    session = models.OneToOneField('assessments.TestSession', on_delete=models.CASCADE, related_name='result')
    candidate = models.ForeignKey('candidates.Candidate', on_delete=models.CASCADE, related_name='results')
    test = models.ForeignKey('catalog.Test', on_delete=models.PROTECT, related_name='results')
    test_type = models.CharField(max_length=30, db_index=True)

    total_marks = models.PositiveIntegerField()
    obtained_marks = models.PositiveIntegerField()
    percentage = models.FloatField()
    grade = models.CharField(max_length=2, choices=Grade.choices)
    passed = models.BooleanField()

    is_verified = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Result {self.grade} for {self.session.session_code}"
