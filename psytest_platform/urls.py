from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter

# Import Views
from assessments.views import TestSessionViewSet
from candidates.views import CandidateViewSet
from catalog.views import TestViewSet
from results.views import ResultViewSet

# Router
router = DefaultRouter()
router.register(r'candidates', CandidateViewSet, basename='candidates')
router.register(r'tests', TestViewSet, basename='tests')
router.register(r'sessions', TestSessionViewSet, basename='sessions')
router.register(r'results', ResultViewSet, basename='results')

urlpatterns = [
    path('admin/', admin.site.urls),

    # --- Authentication & Profile ---
    path('api/', include('users.urls')),

    # --- Analytics, Reports & Audit ---
    path('api/', include('analytics.urls')),
    path('api/', include('cores.urls')),

    # --- Standard API Routes ---
    path('api/', include(router.urls)),
]
