from django.urls import path
from .views import DashboardView, TestPerformanceView, CandidateReportView

urlpatterns = [
    path('analytics/dashboard/', DashboardView.as_view(), name='analytics-dashboard'),
    path('analytics/test-performance/', TestPerformanceView.as_view(), name='analytics-test-performance'),
    path('reports/candidate/<int:candidate_id>/', CandidateReportView.as_view(), name='candidate-report'),
]
