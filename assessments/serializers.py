from django.utils import timezone
from rest_framework import serializers

from catalog.serializers import TestPublicSerializer
from .models import TestSession, Answer

class AnswerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Answer
        fields = ['id', 'question', 'selected_answer', 'is_correct', 'time_taken', 'score', 'answered_at']
        read_only_fields = fields

class TestSessionSerializer(serializers.ModelSerializer):
    """Lightweight serializer for lists / dashboard history."""
    test_title = serializers.CharField(source='test.title', read_only=True)
    application_number = serializers.CharField(source='candidate.application_number', read_only=True)
    answers = AnswerSerializer(many=True, read_only=True)

    class Meta:
        model = TestSession
        fields = [
            'id', 'session_code', 'candidate', 'application_number', 'test', 'test_title',
            'status', 'started_at', 'completed_at', 'score', 'answers', 'created_at',
        ]
        read_only_fields = fields

class ActiveTestSessionSerializer(TestSessionSerializer):
    """Heavy serializer for taking the test. Includes QUESTIONS (without the answer key)."""
    test = TestPublicSerializer(read_only=True)
    time_remaining_seconds = serializers.SerializerMethodField()

    class Meta(TestSessionSerializer.Meta):
        fields = TestSessionSerializer.Meta.fields + ['time_remaining_seconds']
        read_only_fields = fields

    def get_time_remaining_seconds(self, obj):
        if obj.status != TestSession.Status.IN_PROGRESS or obj.started_at is None:
            return 0
        elapsed = (timezone.now() - obj.started_at).total_seconds()
        total = obj.test.duration_minutes * 60
        return max(0, int(total - elapsed))

class SessionCreateSerializer(serializers.Serializer):
    candidate_id = serializers.IntegerField()
    test_id = serializers.IntegerField()

class AnswerSubmitSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    answer = serializers.JSONField()
    time_taken = serializers.IntegerField(min_value=0, required=False, default=0)
