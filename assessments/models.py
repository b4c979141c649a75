# assessments/models.py
from django.db import models

from cores.codes import generate_unique_code


class TestSession(models.Model):
    """Tracks a candidate's attempt at one test."""

    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        IN_PROGRESS = "in_progress", "In Progress"
        # Declared for completeness; no operation moves a session into these two
        PAUSED = "paused", "Paused"
        COMPLETED = "completed", "Completed"
        ABANDONED = "abandoned", "Abandoned"

    session_code = models.CharField(max_length=40, unique=True, blank=True)
    candidate = models.ForeignKey('candidates.Candidate', on_delete=models.CASCADE, related_name='sessions')
    test = models.ForeignKey('catalog.Test', on_delete=models.PROTECT, related_name='sessions')

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.SCHEDULED, db_index=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)  # When they submitted

    # Score summary, only set once the session is completed
    score = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.session_code} - {self.test.title}"

    def save(self, *args, **kwargs):
        if not self.session_code:
            self.session_code = generate_unique_code("SES", TestSession, "session_code")
        super().save(*args, **kwargs)


class Answer(models.Model):
    session = models.ForeignKey(TestSession, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey('catalog.Question', on_delete=models.CASCADE)

    selected_answer = models.JSONField(null=True, blank=True)
    is_correct = models.BooleanField(default=False)
    time_taken = models.PositiveIntegerField(default=0, help_text="Seconds, as reported by the client")
    score = models.PositiveIntegerField(default=0)

    answered_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['session', 'question'], name='unique_answer_per_question'),
        ]

    def __str__(self):
        return f"{self.session.session_code} / Q{self.question_id}"
