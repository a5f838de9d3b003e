import logging
from typing import Any, Dict, List

from resume_processor.services.vector_service import VectorService

logger = logging.getLogger(__name__)


class ResumeSearchService:
    def __init__(self, openai_service):
        self.openai_service = openai_service
        self.vector_service = VectorService(openai_service)

    def search_chunks_by_semantic(self, query: str, resume_id=None, limit: int = 5) -> List[Dict[str, Any]]:
        """
        Search for resume chunks semantically similar to the query text

        Args:
            query: The question or search phrase
            resume_id: Only search this resume's chunks when given
            limit: Maximum number of results to return

        Returns:
            List of matching chunks with similarity scores, best first
        """
        try:
            results = self.vector_service.search_similar(query, resume_id=resume_id, limit=limit)
            return [
                {
                    'chunk_id': result.chunk_id,
                    'resume_id': result.resume_id,
                    'chunk_index': result.chunk_index,
                    'content': result.text,
                    'vector_similarity': round(result.score, 4),
                }
                for result in results
            ]

        except Exception as e:
            logger.error(f"Error in semantic resume search: {e}")
            raise
