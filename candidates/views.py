from rest_framework import viewsets, filters

from cores.models import AuditLog
from cores.permissions import HasCapability, IsOwnerOrStaff
from .models import Candidate
from .serializers import CandidateSerializer


class CandidateViewSet(viewsets.ModelViewSet):
    """Candidate records. Staff manage them, a candidate may read their own."""
    queryset = Candidate.objects.select_related('user').prefetch_related('assigned_tests')
    serializer_class = CandidateSerializer
    permission_classes = [HasCapability, IsOwnerOrStaff]
    capability_prefix = "candidates"
    lookup_value_regex = r"\d+"

    filter_backends = [filters.SearchFilter]
    search_fields = ['application_number', 'user__email', 'user__first_name', 'user__last_name']

    def get_queryset(self):
        queryset = super().get_queryset()
        status = self.request.query_params.get('status')
        if status:
            queryset = queryset.filter(application_status=status)
        return queryset

    def perform_create(self, serializer):
        candidate = serializer.save()
        AuditLog.record(
            self.request.user, 'CREATE', candidate,
            details=f"Created candidate {candidate.application_number} for {candidate.user.email}"
        )

    def perform_update(self, serializer):
        candidate = serializer.save()
        AuditLog.record(self.request.user, 'UPDATE', candidate, details=f"Updated candidate {candidate.application_number}")

    def perform_destroy(self, instance):
        AuditLog.record(self.request.user, 'DELETE', instance, details=f"Deleted candidate {instance.application_number}")
        instance.delete()
