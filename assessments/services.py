"""
Session engine: the only code that mutates a TestSession.

    scheduled --start--> in_progress --submit--> completed

Answers are recorded while in_progress. Submitting is refused only once the
session is already completed, so a scheduled session can be submitted
directly and scores as unattempted.
"""
import logging

from django.utils import timezone

from candidates.services import get_candidate
from catalog.models import Question
from catalog.services import get_test
from cores.exceptions import AlreadyCompleted, InvalidTransition, NotFound
from cores.models import AuditLog
from .models import Answer, TestSession

logger = logging.getLogger(__name__)


def get_session(session_id):
    try:
        return TestSession.objects.select_related('test', 'candidate').get(pk=session_id)
    except (TestSession.DoesNotExist, ValueError, TypeError):
        raise NotFound("Session not found")


def create_session(candidate_id, test_id, actor=None):
    test = get_test(test_id)
    candidate = get_candidate(candidate_id)

    session = TestSession.objects.create(candidate=candidate, test=test)
    AuditLog.record(actor, 'SESSION', session, details=f"Scheduled {test.title} for {candidate.application_number}")
    logger.info("Session %s scheduled (candidate=%s, test=%s)", session.session_code, candidate.pk, test.pk)
    return session


def start_session(session_id, actor=None):
    session = get_session(session_id)
    if session.status != TestSession.Status.SCHEDULED:
        raise InvalidTransition("Session cannot be started")

    session.status = TestSession.Status.IN_PROGRESS
    session.started_at = timezone.now()
    session.save(update_fields=['status', 'started_at', 'updated_at'])

    AuditLog.record(actor, 'SESSION', session, details="Session started")
    logger.info("Session %s started", session.session_code)
    return session


def evaluate_answer(question, answer):
    """
    Returns (is_correct, marks awarded).
    Only multiple-choice questions are auto-scored; anything else records zero.
    """
    if question.question_type != Question.QuestionType.MCQ:
        return False, 0

    correct_option = question.correct_option()
    is_correct = correct_option is not None and answer == correct_option.text
    return is_correct, question.marks if is_correct else 0


def submit_answer(session_id, question_id, answer, time_taken=0):
    session = get_session(session_id)
    if session.status != TestSession.Status.IN_PROGRESS:
        raise InvalidTransition("Session not in progress")

    try:
        question = Question.objects.prefetch_related('options').get(test_id=session.test_id, pk=question_id)
    except (Question.DoesNotExist, ValueError, TypeError):
        raise NotFound("Question not found")

    is_correct, score = evaluate_answer(question, answer)

    # A repeated answer to the same question replaces the earlier one
    Answer.objects.update_or_create(
        session=session,
        question=question,
        defaults={
            'selected_answer': answer,
            'is_correct': is_correct,
            'time_taken': time_taken or 0,
            'score': score,
        },
    )
    logger.debug("Session %s answered question %s (correct=%s)", session.session_code, question.pk, is_correct)
    return session


def percentage_of(obtained_marks, total_marks):
    # 0.0 rather than NaN when the test carries no marks; Result.percentage is not nullable
    if not total_marks:
        return 0.0
    return obtained_marks / total_marks * 100


def compute_score(test, answers):
    attempted = len(answers)
    correct = sum(1 for a in answers if a.is_correct)
    obtained_marks = sum(a.score for a in answers)

    return {
        'total_questions': test.questions.count(),
        'attempted': attempted,
        'correct': correct,
        'incorrect': attempted - correct,
        'total_marks': test.total_marks,
        'obtained_marks': obtained_marks,
        'percentage': percentage_of(obtained_marks, test.total_marks),
    }


def submit_session(session_id, actor=None):
    session = get_session(session_id)
    if session.status == TestSession.Status.COMPLETED:
        raise AlreadyCompleted("Session already completed")

    test = get_test(session.test_id)
    if not test.total_marks:
        logger.warning("Test %s has no total marks; session %s scores 0%%", test.pk, session.session_code)

    session.score = compute_score(test, list(session.answers.all()))
    session.status = TestSession.Status.COMPLETED
    session.completed_at = timezone.now()
    session.save(update_fields=['score', 'status', 'completed_at', 'updated_at'])

    AuditLog.record(
        actor, 'SESSION', session,
        details=f"Session submitted: {session.score['obtained_marks']}/{session.score['total_marks']}"
    )
    logger.info("Session %s completed with %.2f%%", session.session_code, session.score['percentage'])
    return session
