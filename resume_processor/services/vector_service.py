from django.conf import settings
import logging
from typing import List, NamedTuple, Optional, Sequence
import numpy as np

from ..exceptions import DimensionMismatch
from ..models import Resume, ResumeChunk

logger = logging.getLogger(__name__)


class SearchResult(NamedTuple):
    text: str
    score: float
    chunk_id: int
    resume_id: object
    chunk_index: int


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Raises DimensionMismatch when the lengths differ. A zero-magnitude vector
    has no direction, so its similarity to anything is 0.0.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatch(len(a), len(b))

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


class VectorService:
    def __init__(self, openai_service, embedding_dimension: int = None):
        self.openai_service = openai_service
        self.embedding_dimension = embedding_dimension or settings.EMBEDDING_DIMENSIONS

    def store_chunk(self, resume: Resume, chunk_text: str, chunk_index: int, embedding: List[float]) -> ResumeChunk:
        """
        Stores an already computed embedding for a chunk.
        """
        if len(embedding) != self.embedding_dimension:
            raise DimensionMismatch(self.embedding_dimension, len(embedding))

        return ResumeChunk.objects.create(
            resume=resume,
            chunk_index=chunk_index,
            content=chunk_text,
            embedding=embedding,
        )

    def search(self, query_embedding: Sequence[float], resume_id=None, limit: int = 5) -> List[SearchResult]:
        """
        Exhaustive cosine search over the chunks in scope.

        Args:
            query_embedding: Vector to compare every candidate chunk against
            resume_id: Restrict candidates to one resume, or None for all chunks
            limit: Maximum number of results to return

        Returns:
            Results sorted by descending score. Equal scores keep insertion order.
        """
        candidates = ResumeChunk.objects.all()
        if resume_id is not None:
            candidates = candidates.filter(resume_id=resume_id)
        candidates = candidates.order_by('id')

        scored = [
            SearchResult(
                text=chunk.content,
                score=cosine_similarity(chunk.embedding, query_embedding),
                chunk_id=chunk.id,
                resume_id=chunk.resume_id,
                chunk_index=chunk.chunk_index,
            )
            for chunk in candidates.iterator()
        ]
        scored.sort(key=lambda result: result.score, reverse=True)

        logger.debug(f"Scored {len(scored)} chunks, returning top {min(limit, len(scored))}")
        return scored[:max(limit, 0)]

    def search_similar(self, text: str, resume_id: Optional[object] = None, limit: int = 5) -> List[SearchResult]:
        """
        Embeds the text and searches for the most similar chunks.
        """
        try:
            query_embedding = self.openai_service.create_embedding(text)
            return self.search(query_embedding, resume_id=resume_id, limit=limit)
        except Exception as e:
            logger.error(f"Error searching similar chunks: {e}")
            raise
