# results/views.py
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from candidates.services import get_candidate
from cores.permissions import HasCapability, IsOwnerOrStaff, is_staff_user
from .models import Result
from .serializers import ResultSerializer
from .services import generate_from_session, results_for_candidate


class ResultViewSet(viewsets.ReadOnlyModelViewSet):
    """Staff see every result; candidates only their own."""
    serializer_class = ResultSerializer
    permission_classes = [HasCapability, IsOwnerOrStaff]
    capability_prefix = "results"
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        queryset = Result.objects.select_related('session', 'candidate__user', 'test')
        user = self.request.user
        if not is_staff_user(user):
            queryset = queryset.filter(candidate__user=user)

        test_type = self.request.query_params.get('test_type')
        if test_type:
            queryset = queryset.filter(test_type=test_type)
        return queryset

    @action(detail=False, methods=['post'], url_path=r'generate/(?P<session_id>\d+)')
    def generate(self, request, session_id=None):
        result = generate_from_session(session_id, actor=request.user)
        return Response(ResultSerializer(result).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path=r'candidate/(?P<candidate_id>\d+)')
    def by_candidate(self, request, candidate_id=None):
        candidate = get_candidate(candidate_id)
        if not is_staff_user(request.user) and candidate.user_id != request.user.id:
            raise PermissionDenied("You can only view your own results.")

        results = results_for_candidate(candidate.pk).select_related('session', 'candidate__user')
        return Response(ResultSerializer(results, many=True).data)
