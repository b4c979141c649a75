from cores.exceptions import NotFound
from .models import Candidate


def get_candidate(candidate_id):
    try:
        return Candidate.objects.select_related('user').get(pk=candidate_id)
    except (Candidate.DoesNotExist, ValueError, TypeError):
        raise NotFound("Candidate not found")
