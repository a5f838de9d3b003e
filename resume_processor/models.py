from django.conf import settings
from django.db import models
import uuid
from pgvector.django import VectorField


class Resume(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_PROCESSED = 'processed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    filename = models.CharField(max_length=256)
    content_type = models.CharField(max_length=128, blank=True, default='')
    content = models.TextField(blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-uploaded_at']

    def __str__(self):
        return self.filename

    @property
    def processing_status(self) -> str:
        try:
            progress = self.chunking_progress
        except ChunkingProgress.DoesNotExist:
            return self.STATUS_PENDING
        return self.STATUS_PROCESSED if progress.is_complete else self.STATUS_PROCESSING


class ResumeChunk(models.Model):
    resume = models.ForeignKey(Resume, on_delete=models.CASCADE, related_name='chunks')
    chunk_index = models.PositiveIntegerField()
    content = models.TextField()
    embedding = VectorField(dimensions=settings.EMBEDDING_DIMENSIONS)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('resume', 'chunk_index')
        ordering = ['chunk_index']

    def __str__(self):
        return f"{self.resume} - Chunk {self.chunk_index}"


class ChunkingProgress(models.Model):
    """Checkpoint of the embedding pipeline for one resume."""

    resume = models.OneToOneField(Resume, on_delete=models.CASCADE, related_name='chunking_progress')
    position = models.PositiveIntegerField(default=0)
    chunk_index = models.PositiveIntegerField(default=0)
    is_complete = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'chunking progress'

    def __str__(self):
        state = 'complete' if self.is_complete else f"at {self.position}, next chunk {self.chunk_index}"
        return f"{self.resume} ({state})"
