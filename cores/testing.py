"""Factories shared by the app test suites."""
import datetime

from django.contrib.auth import get_user_model

from candidates.models import Candidate
from catalog.models import Option, Question, Test

User = get_user_model()

DEFAULT_PASSWORD = "s3cure-pass-123"


def make_user(email, role="candidate", password=DEFAULT_PASSWORD, **extra):
    extra.setdefault("first_name", email.split("@")[0].title())
    extra.setdefault("last_name", "Tester")
    return User.objects.create_user(username=email, email=email, password=password, role=role, **extra)


def make_candidate(email="candidate@example.com", **extra):
    user = make_user(email, role=User.Role.CANDIDATE)
    extra.setdefault("date_of_birth", datetime.date(1998, 4, 12))
    extra.setdefault("gender", Candidate.Gender.FEMALE)
    extra.setdefault("primary_phone", "+15550100")
    return Candidate.objects.create(user=user, **extra)


def make_test(questions=(), **fields):
    """
    questions: iterable of (marks, [(option_text, is_correct), ...]) or
    (marks, options, question_type).
    """
    fields.setdefault("title", "Concentration Battery")
    fields.setdefault("description", "Sustained attention test")
    fields.setdefault("test_type", Test.TestType.CONCENTRATION)
    fields.setdefault("duration_minutes", 30)
    fields.setdefault("passing_score", 60)
    fields.setdefault("total_marks", sum(q[0] for q in questions))
    test = Test.objects.create(**fields)

    for position, row in enumerate(questions):
        marks, options = row[0], row[1]
        question_type = row[2] if len(row) > 2 else Question.QuestionType.MCQ
        question = Question.objects.create(
            test=test, text=f"Question {position + 1}", question_type=question_type, marks=marks, order=position,
        )
        for text, is_correct in options:
            Option.objects.create(question=question, text=text, is_correct=is_correct)
    return test


def make_scenario_test(**fields):
    """100 marks, pass at 60: q1 (50) answer "A", q2 (50) answer "Y"."""
    fields.setdefault("total_marks", 100)
    fields.setdefault("passing_score", 60)
    return make_test(
        [
            (50, [("A", True), ("B", False)]),
            (50, [("X", False), ("Y", True)]),
        ],
        **fields,
    )
