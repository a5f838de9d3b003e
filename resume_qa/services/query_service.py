import logging
from typing import List, NamedTuple

from django.conf import settings
from django.core.exceptions import ValidationError

from resume_processor.exceptions import ResumeNotFound
from resume_processor.models import Resume
from resume_processor.services.vector_service import VectorService
from resume_qa.models import QueryRecord

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful resume analyst. Use the provided resume context to answer the user's "
    "question accurately. Answer only from the given context. If the answer is not present "
    "in the context, say that you don't have enough information."
)
ERROR_RESPONSE = "Sorry, there was an error processing your query. Please try again."
EMPTY_RESPONSE = "Sorry, I couldn't generate a response."


class QueryAnswer(NamedTuple):
    answer: str
    context: str


class ResumeQueryService:
    """Answers questions about uploaded resumes from their most similar chunks."""

    def __init__(self, openai_service, context_limit: int = None):
        self.openai_service = openai_service
        self.vector_service = VectorService(openai_service)
        self.context_limit = context_limit or settings.QUERY_CONTEXT_LIMIT

    def answer_query(self, question: str, resume_id=None) -> QueryAnswer:
        """
        Answer a question using retrieved resume chunks as context.

        Args:
            question: The user's question
            resume_id: Restrict retrieval to one resume, or None to search all resumes

        Returns:
            QueryAnswer with the generated answer and the context it was given.
            Any failure is logged and turned into a fallback answer with empty
            context; nothing is recorded in that case.
        """
        try:
            logger.info(f"Answering query: '{question}' (resume: {resume_id or 'all'})")
            resume = self._get_scope(resume_id)

            query_embedding = self.openai_service.create_embedding(question)
            results = self.vector_service.search(
                query_embedding,
                resume_id=resume.id if resume else None,
                limit=self.context_limit,
            )
            logger.info(f"Retrieved {len(results)} chunks for context")
            for i, result in enumerate(results, 1):
                logger.debug(f"Context chunk {i}: resume {result.resume_id}, "
                             f"chunk {result.chunk_index} (similarity: {result.score:.4f})")

            context = self._format_context([result.text for result in results])
            user_prompt = self._create_user_prompt(question, context)

            answer = self.openai_service.complete(SYSTEM_PROMPT, user_prompt) or EMPTY_RESPONSE

            QueryRecord.objects.create(query=question, response=answer, resume=resume)
            return QueryAnswer(answer=answer, context=context)

        except Exception as e:
            logger.error(f"Error processing query: {e}", exc_info=True)
            return QueryAnswer(answer=ERROR_RESPONSE, context="")

    def get_recent_queries(self, limit: int = 10) -> List[QueryRecord]:
        return list(QueryRecord.objects.order_by('-created_at', '-id')[:max(limit, 0)])

    def _get_scope(self, resume_id):
        if resume_id is None:
            return None
        try:
            return Resume.objects.get(id=resume_id)
        except (Resume.DoesNotExist, ValidationError, ValueError) as e:
            raise ResumeNotFound(resume_id) from e

    def _format_context(self, chunks: List[str]) -> str:
        return "\n\n".join(chunks)

    def _create_user_prompt(self, question: str, context: str) -> str:
        return f"Context from resume:\n{context}\n\nQuestion: {question}"
