import logging

from django.db import IntegrityError, transaction

from assessments.services import get_session, percentage_of
from catalog.services import get_test
from cores.exceptions import ConflictError
from cores.models import AuditLog
from .models import Result

logger = logging.getLogger(__name__)

# (inclusive lower bound, grade), highest first
GRADE_THRESHOLDS = (
    (90, Result.Grade.A_PLUS),
    (80, Result.Grade.A),
    (70, Result.Grade.B),
    (60, Result.Grade.C),
    (50, Result.Grade.D),
)


def grade_for(percentage):
    for lower_bound, grade in GRADE_THRESHOLDS:
        if percentage >= lower_bound:
            return grade
    return Result.Grade.F


def generate_from_session(session_id, actor=None):
    """
    Derives and stores the graded Result of a session.
    A session that was never submitted has no score and grades as 0%.
    """
    session = get_session(session_id)
    test = get_test(session.test_id)

    score = session.score
    if not score:
        logger.warning("Session %s has no score (status=%s); deriving from zero", session.session_code, session.status)
        score = {'total_marks': test.total_marks, 'obtained_marks': 0, 'percentage': percentage_of(0, test.total_marks)}

    percentage = score['percentage']
    try:
        with transaction.atomic():
            result = Result.objects.create(
                session=session,
                candidate_id=session.candidate_id,
                test=test,
                test_type=test.test_type,
                total_marks=score['total_marks'],
                obtained_marks=score['obtained_marks'],
                percentage=percentage,
                grade=grade_for(percentage),
                passed=percentage >= test.passing_score,
            )
    except IntegrityError:
        raise ConflictError("Result already exists for this session")

    AuditLog.record(actor, 'RESULT', result, details=f"Result {result.grade} for session {session.session_code}")
    logger.info("Result %s generated for session %s (%s)", result.pk, session.session_code, result.grade)
    return result


def results_for_candidate(candidate_id):
    return Result.objects.filter(candidate_id=candidate_id).select_related('test').order_by('-created_at', '-id')
