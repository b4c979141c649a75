from rest_framework import generics
from .models import AuditLog
from .permissions import HasCapability
from .serializers import AuditLogSerializer


class AuditLogListView(generics.ListAPIView):
    # Select related avoids N+1 queries when fetching users
    queryset = AuditLog.objects.select_related('actor').all()
    serializer_class = AuditLogSerializer
    permission_classes = [HasCapability]
    operation = "audit.list"

    def get_queryset(self):
        queryset = super().get_queryset()
        action = self.request.query_params.get('action')
        if action:
            queryset = queryset.filter(action=action.upper())
        return queryset
