import logging

from celery import shared_task

from .services.embedding_pipeline import EmbeddingPipeline
from .services.openai_service import OpenAIService
from .services.scheduler import CeleryScheduler, StepTicket

logger = logging.getLogger(__name__)


@shared_task(name="resume_processor.process_resume_step", ignore_result=True)
def process_resume_step(resume_id: str, position: int, chunk_index: int) -> str:
    """Run one embedding pipeline step in the worker. The step schedules its own successor."""
    pipeline = EmbeddingPipeline(OpenAIService(), CeleryScheduler())
    outcome = pipeline.step(StepTicket(resume_id, position, chunk_index))
    logger.debug(f"Step for resume {resume_id} at position {position} finished: {outcome.value}")
    return outcome.value
