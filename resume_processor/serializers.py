from rest_framework import serializers
from .models import Resume, ResumeChunk


class ResumeChunkSerializer(serializers.ModelSerializer):
    class Meta:
        model = ResumeChunk
        fields = ['id', 'chunk_index', 'content', 'created_at']


class ResumeListSerializer(serializers.ModelSerializer):
    class Meta:
        model = Resume
        fields = ['id', 'filename', 'uploaded_at']


class ResumeSerializer(serializers.ModelSerializer):
    processing_status = serializers.CharField(read_only=True)
    chunks = ResumeChunkSerializer(many=True, read_only=True)

    class Meta:
        model = Resume
        fields = ['id', 'filename', 'content_type', 'content', 'metadata', 'uploaded_at', 'processing_status', 'chunks']


class ResumeUploadSerializer(serializers.Serializer):
    filename = serializers.CharField(max_length=256, required=False)
    content_type = serializers.CharField(max_length=128, required=False, allow_blank=True, default='')
    content = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    file = serializers.FileField(required=False)
    metadata = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        if 'file' not in attrs and 'content' not in attrs:
            raise serializers.ValidationError("Provide either a file or the resume text as content")
        if 'file' not in attrs and not attrs.get('filename'):
            raise serializers.ValidationError({"filename": "This field is required when uploading text."})
        return attrs
