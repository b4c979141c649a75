from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cores.permissions import HasCapability, IsOwnerOrStaff, is_staff_user
from . import services
from .models import TestSession
from .serializers import (
    TestSessionSerializer, ActiveTestSessionSerializer,
    SessionCreateSerializer, AnswerSubmitSerializer,
)


class TestSessionViewSet(mixins.CreateModelMixin,
                         mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         viewsets.GenericViewSet):
    """
    Staff schedule sessions; candidates start, answer and submit their own.
    Every state change goes through assessments.services.
    """
    serializer_class = TestSessionSerializer
    permission_classes = [HasCapability, IsOwnerOrStaff]
    capability_prefix = "sessions"
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        queryset = TestSession.objects.select_related('test', 'candidate').prefetch_related('answers')
        user = self.request.user
        if not is_staff_user(user):
            queryset = queryset.filter(candidate__user=user)

        session_status = self.request.query_params.get('status')
        if session_status:
            queryset = queryset.filter(status=session_status)
        return queryset

    def _load_session(self, pk):
        session = services.get_session(pk)
        self.check_object_permissions(self.request, session)
        return session

    def create(self, request, *args, **kwargs):
        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = services.create_session(
            serializer.validated_data['candidate_id'],
            serializer.validated_data['test_id'],
            actor=request.user,
        )
        return Response(TestSessionSerializer(session).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post', 'patch'])
    def start(self, request, pk=None):
        self._load_session(pk)
        session = services.start_session(pk, actor=request.user)
        return Response(ActiveTestSessionSerializer(session).data)

    @action(detail=True, methods=['post'])
    def answer(self, request, pk=None):
        """
        Records one answer.
        Payload: { "question_id": 1, "answer": "A", "time_taken": 12 }
        """
        self._load_session(pk)
        serializer = AnswerSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = services.submit_answer(
            pk,
            serializer.validated_data['question_id'],
            serializer.validated_data['answer'],
            time_taken=serializer.validated_data['time_taken'],
        )
        return Response(TestSessionSerializer(session).data)

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        self._load_session(pk)
        session = services.submit_session(pk, actor=request.user)
        return Response(TestSessionSerializer(session).data)
