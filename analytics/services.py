"""Read-only rollups over results, sessions and candidates."""
from django.db.models import Avg

from assessments.models import TestSession
from candidates.models import Candidate
from candidates.services import get_candidate
from results.models import Result
from results.services import results_for_candidate


def _rate(part, whole):
    if not whole:
        return 0
    return round(part / whole * 100, 2)


def dashboard():
    total_results = Result.objects.count()
    passed_results = Result.objects.filter(passed=True).count()

    return {
        "total_candidates": Candidate.objects.count(),
        "total_sessions": TestSession.objects.count(),
        "completed_sessions": TestSession.objects.filter(status=TestSession.Status.COMPLETED).count(),
        "total_results": total_results,
        "pass_rate": _rate(passed_results, total_results),
    }


def test_performance(test_type=None):
    results = Result.objects.all()
    if test_type:
        results = results.filter(test_type=test_type)

    total_attempts = results.count()
    if total_attempts == 0:
        return {"total_attempts": 0, "average_score": 0, "pass_rate": 0}

    average = results.aggregate(average=Avg('percentage'))['average'] or 0
    return {
        "total_attempts": total_attempts,
        "average_score": round(average, 2),
        "pass_rate": _rate(results.filter(passed=True).count(), total_attempts),
    }


def candidate_report(candidate_id):
    candidate = get_candidate(candidate_id)
    results = list(results_for_candidate(candidate.pk))

    total_tests = len(results)
    passed_tests = sum(1 for r in results if r.passed)
    average_score = sum(r.percentage for r in results) / total_tests if total_tests else 0

    return {
        "candidate": {
            "application_number": candidate.application_number,
            "status": candidate.application_status,
        },
        "summary": {
            "total_tests": total_tests,
            "passed_tests": passed_tests,
            "average_score": round(average_score, 2),
        },
        "test_results": [
            {
                "test_type": r.test_type,
                "score": r.percentage,
                "passed": r.passed,
                "grade": r.grade,
            }
            for r in results
        ],
    }
