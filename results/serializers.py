from rest_framework import serializers
from .models import Result

class ResultSerializer(serializers.ModelSerializer):
    # Fetch details from the related session to show readable names
    session_code = serializers.CharField(source='session.session_code', read_only=True)
    application_number = serializers.CharField(source='candidate.application_number', read_only=True)
    candidate_name = serializers.CharField(source='candidate.user.get_full_name', read_only=True)
    test_title = serializers.CharField(source='test.title', read_only=True)

    class Meta:
        model = Result
        fields = [
            'id',
            'session',
            'session_code',
            'candidate',
            'application_number',
            'candidate_name',
            'test',
            'test_title',
            'test_type',
            'total_marks',
            'obtained_marks',
            'percentage',
            'grade',
            'passed',
            'is_verified',
            'created_at',
        ]
        read_only_fields = fields
