from rest_framework import serializers
from .models import QueryRecord


class QueryRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = QueryRecord
        fields = ['id', 'query', 'response', 'resume', 'created_at']


class AskSerializer(serializers.Serializer):
    query = serializers.CharField()
    resume_id = serializers.UUIDField(required=False, allow_null=True)
