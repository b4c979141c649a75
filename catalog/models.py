# catalog/models.py
from django.conf import settings
from django.db import models

class Test(models.Model):
    class TestType(models.TextChoices):
        CONCENTRATION = "concentration", "Concentration"
        REACTION = "reaction", "Reaction"
        VISUAL = "visual", "Visual"
        MEMORY = "memory", "Memory"
        FIELD_INDEPENDENCE = "field-independence", "Field Independence"

    class Difficulty(models.TextChoices):
        EASY = "easy", "Easy"
        MEDIUM = "medium", "Medium"
        HARD = "hard", "Hard"

    title = models.CharField(max_length=255)
    description = models.TextField()
    test_type = models.CharField(max_length=30, choices=TestType.choices, db_index=True)
    difficulty = models.CharField(max_length=20, choices=Difficulty.choices, default=Difficulty.MEDIUM)

    duration_minutes = models.PositiveIntegerField()
    passing_score = models.PositiveIntegerField(help_text="Pass mark as a percentage")
    total_marks = models.PositiveIntegerField()

    # Soft delete: tests are deactivated, never removed
    is_active = models.BooleanField(default=True)
    is_published = models.BooleanField(default=False)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_tests')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.title

    @property
    def question_marks_total(self):
        return sum(q.marks for q in self.questions.all())

class Question(models.Model):
    class QuestionType(models.TextChoices):
        MCQ = "mcq", "Multiple Choice"
        THEORY = "theory", "Open Ended"

    test = models.ForeignKey(Test, related_name='questions', on_delete=models.CASCADE)

    text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices, default=QuestionType.MCQ)
    marks = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['order', 'id']

    def __str__(self):
        return f"{self.text[:50]}..."

    def correct_option(self):
        # First flagged option wins if several are marked correct
        for option in self.options.all():
            if option.is_correct:
                return option
        return None

class Option(models.Model):
    question = models.ForeignKey(Question, related_name='options', on_delete=models.CASCADE)
    text = models.CharField(max_length=255)
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.text
