import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from .exceptions import ExtractionFailure, ResumeNotFound, UnsupportedFileType
from .serializers import ResumeListSerializer, ResumeSerializer, ResumeUploadSerializer
from .services.embedding_pipeline import EmbeddingPipeline
from .services.file_processor_service import FileProcessorService
from .services.openai_service import OpenAIService
from .services.resume_service import ResumeService
from .services.scheduler import get_scheduler

logger = logging.getLogger(__name__)


def get_resume_service() -> ResumeService:
    return ResumeService(EmbeddingPipeline(OpenAIService(), get_scheduler()))


class ResumeViewSet(viewsets.ViewSet):
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def list(self, request):
        resumes = get_resume_service().list_resumes()
        return Response(ResumeListSerializer(resumes, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            resume = get_resume_service().get_resume(pk)
        except ResumeNotFound:
            return Response({'error': 'Resume not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ResumeSerializer(resume).data)

    def create(self, request):
        serializer = ResumeUploadSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        filename = data.get('filename')
        content_type = data.get('content_type', '')
        content = data.get('content', '')

        uploaded_file = data.get('file')
        if uploaded_file is not None:
            filename = filename or uploaded_file.name
            content_type = content_type or uploaded_file.content_type or ''
            try:
                content = FileProcessorService().extract_text(filename, content_type, uploaded_file.read())
            except UnsupportedFileType as e:
                return Response({'error': str(e)}, status=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE)
            except ExtractionFailure as e:
                return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        resume_id = get_resume_service().upload_resume(filename, content_type, content, data.get('metadata'))
        return Response({
            'message': 'Resume uploaded, embedding started',
            'resume_id': resume_id,
        }, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        try:
            get_resume_service().delete_resume(pk)
        except ResumeNotFound:
            return Response({'error': 'Resume not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get'], url_path='status')
    def processing_status(self, request, pk=None):
        try:
            return Response(get_resume_service().get_progress(pk))
        except ResumeNotFound:
            return Response({'error': 'Resume not found'}, status=status.HTTP_404_NOT_FOUND)
