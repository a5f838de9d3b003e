import logging
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError

from ..exceptions import ResumeNotFound
from ..models import ChunkingProgress, Resume

logger = logging.getLogger(__name__)


class ResumeService:
    """Upload, lookup and deletion of resumes."""

    def __init__(self, pipeline):
        self.pipeline = pipeline

    def upload_resume(self, filename: str, content_type: str, content: str,
                      metadata: Optional[Dict[str, Any]] = None):
        """
        Store a resume and start embedding it. Returns the new resume id.

        Embedding happens afterwards in pipeline steps, so this returns as soon
        as the resume row and its checkpoint are saved.
        """
        resume = Resume.objects.create(
            filename=filename,
            content_type=content_type or '',
            content=content or '',
            metadata=metadata or {},
        )
        logger.info(f"Stored resume {resume.id} ({filename}, {len(resume.content)} chars)")
        self.pipeline.start(resume)
        return resume.id

    def list_resumes(self) -> List[Dict[str, Any]]:
        return list(Resume.objects.order_by('-uploaded_at').values('id', 'filename', 'uploaded_at'))

    def get_resume(self, resume_id) -> Resume:
        try:
            return Resume.objects.get(id=resume_id)
        except (Resume.DoesNotExist, ValidationError, ValueError):
            raise ResumeNotFound(resume_id)

    def get_progress(self, resume_id) -> Dict[str, Any]:
        resume = self.get_resume(resume_id)
        progress = ChunkingProgress.objects.filter(resume=resume).first()
        return {
            'id': resume.id,
            'status': resume.processing_status,
            'position': progress.position if progress else 0,
            'total_length': len(resume.content),
            'chunks_embedded': resume.chunks.count(),
            'is_complete': bool(progress and progress.is_complete),
        }

    def delete_resume(self, resume_id) -> bool:
        """Delete a resume with its chunks and checkpoint. Scheduled steps find it gone and stop."""
        resume = self.get_resume(resume_id)
        chunk_count = resume.chunks.count()
        resume.delete()
        logger.info(f"Deleted resume {resume_id} and {chunk_count} chunks")
        return True
