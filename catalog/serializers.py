# catalog/serializers.py
from django.db import transaction
from rest_framework import serializers

from cores.exceptions import ConflictError
from .models import Test, Question, Option

# --- Helper Serializers ---

class OptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Option
        fields = ['id', 'text', 'is_correct']

class PublicOptionSerializer(serializers.ModelSerializer):
    """Candidates never see which option is correct."""
    class Meta:
        model = Option
        fields = ['id', 'text']

# --- Question Serializers ---

class QuestionSerializer(serializers.ModelSerializer):
    options = OptionSerializer(many=True, required=False)

    class Meta:
        model = Question
        fields = ['id', 'text', 'question_type', 'marks', 'order', 'options']

class PublicQuestionSerializer(serializers.ModelSerializer):
    options = PublicOptionSerializer(many=True, read_only=True)

    class Meta:
        model = Question
        fields = ['id', 'text', 'question_type', 'marks', 'order', 'options']

# --- Test Serializers ---

class TestSerializer(serializers.ModelSerializer):
    questions = QuestionSerializer(many=True, required=False)
    created_by = serializers.PrimaryKeyRelatedField(read_only=True)

    # Read-only counts
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Test
        fields = [
            'id', 'title', 'description', 'test_type', 'difficulty',
            'duration_minutes', 'passing_score', 'total_marks',
            'is_active', 'is_published', 'created_by', 'created_at', 'updated_at',
            'total_questions', 'questions',
        ]
        read_only_fields = ['is_active', 'created_at', 'updated_at']

    def validate_passing_score(self, value):
        if value > 100:
            raise serializers.ValidationError("Passing score is a percentage (0-100).")
        return value

    def validate(self, attrs):
        questions = attrs.get('questions')
        total_marks = attrs.get('total_marks', getattr(self.instance, 'total_marks', None))

        if questions is not None:
            marks = sum(q.get('marks', 1) for q in questions)
        elif self.instance is not None and 'total_marks' in attrs and self.instance.questions.exists():
            marks = self.instance.question_marks_total
        else:
            return attrs

        if marks != total_marks:
            raise serializers.ValidationError(
                {"total_marks": f"Question marks add up to {marks} but total_marks is {total_marks}."}
            )
        return attrs

    def _write_questions(self, test, questions):
        for position, question_data in enumerate(questions):
            options = question_data.pop('options', [])
            question_data.setdefault('order', position)
            question = Question.objects.create(test=test, **question_data)
            Option.objects.bulk_create([Option(question=question, **opt) for opt in options])

    def create(self, validated_data):
        questions = validated_data.pop('questions', [])
        with transaction.atomic():
            test = Test.objects.create(**validated_data)
            self._write_questions(test, questions)
        return test

    def update(self, instance, validated_data):
        questions = validated_data.pop('questions', None)

        # Sessions score against the live question set, so it is frozen once any exist
        if questions is not None and instance.sessions.exists():
            raise ConflictError("Questions cannot be changed once sessions exist for this test")

        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if questions is not None:
                instance.questions.all().delete()
                self._write_questions(instance, questions)
        return instance

class TestPublicSerializer(serializers.ModelSerializer):
    """Detailed view for candidates"""
    questions = PublicQuestionSerializer(many=True, read_only=True)
    total_questions = serializers.IntegerField(source='questions.count', read_only=True)

    class Meta:
        model = Test
        fields = [
            'id', 'title', 'description', 'test_type', 'difficulty',
            'duration_minutes', 'passing_score', 'total_marks',
            'total_questions', 'questions',
        ]
        read_only_fields = fields
