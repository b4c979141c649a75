from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response

from cores.models import AuditLog
from cores.permissions import HasCapability, is_staff_user
from .models import Test
from .serializers import TestSerializer, TestPublicSerializer
from .services import deactivate_test, tests_by_type


class TestViewSet(viewsets.ModelViewSet):
    permission_classes = [HasCapability]
    capability_prefix = "tests"
    lookup_value_regex = r"\d+"

    # Enable search on title and type
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'test_type']

    def get_queryset(self):
        queryset = Test.objects.prefetch_related('questions__options')
        if self.action == 'list':
            # Deactivated tests drop out of listings but stay retrievable by id
            queryset = queryset.filter(is_active=True)
            test_type = self.request.query_params.get('test_type')
            if test_type:
                queryset = queryset.filter(test_type=test_type)
        return queryset

    def get_serializer_class(self):
        # Staff get the full definition, candidates never see the answer key
        if is_staff_user(self.request.user):
            return TestSerializer
        return TestPublicSerializer

    def perform_create(self, serializer):
        test = serializer.save(created_by=self.request.user)
        AuditLog.record(self.request.user, 'CREATE', test, details=f"Created test: {test.title}")

    def perform_update(self, serializer):
        test = serializer.save()
        AuditLog.record(self.request.user, 'UPDATE', test, details=f"Updated test: {test.title}")

    def destroy(self, request, *args, **kwargs):
        deactivate_test(kwargs[self.lookup_field], actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'], url_path=r'by-type/(?P<test_type>[^/.]+)')
    def by_type(self, request, test_type=None):
        """Active, published tests of one type."""
        serializer = self.get_serializer(tests_by_type(test_type), many=True)
        return Response(serializer.data)
