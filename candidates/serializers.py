from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from catalog.models import Test
from .models import Candidate

User = get_user_model()


class CandidateSerializer(serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        validators=[UniqueValidator(queryset=Candidate.objects.all(), message="This account already has a candidate record.")],
    )
    email = serializers.CharField(source='user.email', read_only=True)
    full_name = serializers.CharField(source='user.get_full_name', read_only=True)
    assigned_tests = serializers.PrimaryKeyRelatedField(queryset=Test.objects.all(), many=True, required=False)

    class Meta:
        model = Candidate
        fields = [
            'id', 'user', 'email', 'full_name', 'application_number',
            'date_of_birth', 'gender', 'nationality',
            'primary_phone', 'secondary_phone',
            'application_status', 'assigned_tests', 'created_at', 'updated_at',
        ]
        read_only_fields = ['application_number', 'created_at', 'updated_at']

    def validate_user(self, user):
        if user.role != User.Role.CANDIDATE:
            raise serializers.ValidationError("Only candidate accounts can hold a candidate record.")
        return user
