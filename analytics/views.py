from rest_framework.views import APIView
from rest_framework.response import Response

from cores.permissions import HasCapability
from . import services


class DashboardView(APIView):
    """
    Returns aggregated statistics for the staff dashboard.
    """
    permission_classes = [HasCapability]
    operation = "analytics.dashboard"

    def get(self, request):
        return Response(services.dashboard())


class TestPerformanceView(APIView):
    permission_classes = [HasCapability]
    operation = "analytics.test_performance"

    def get(self, request):
        test_type = request.query_params.get('test_type') or None
        return Response(services.test_performance(test_type))


class CandidateReportView(APIView):
    permission_classes = [HasCapability]
    operation = "reports.candidate"

    def get(self, request, candidate_id):
        return Response(services.candidate_report(candidate_id))
