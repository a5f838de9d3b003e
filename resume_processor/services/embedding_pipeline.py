"""
Incremental chunking and embedding of uploaded resumes.

A resume moves through ``NotStarted -> InProgress(position, chunk_index) ->
Complete``. Each :meth:`EmbeddingPipeline.step` embeds at most one chunk,
checkpoints the new position in :class:`ChunkingProgress` and schedules
exactly one follow-up step, so a long resume never needs one long-running
job and processing resumes from the checkpoint after a crash.
"""
import enum
import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from ..models import ChunkingProgress, Resume
from .scheduler import StepTicket
from .text_splitter_service import TextSplitterService
from .vector_service import VectorService

logger = logging.getLogger(__name__)


class StepOutcome(enum.Enum):
    STORED = 'stored'
    SKIPPED = 'skipped'
    COMPLETED = 'completed'
    RETRYING = 'retrying'
    ABANDONED = 'abandoned'
    STALE = 'stale'


class EmbeddingPipeline:
    def __init__(self, openai_service, scheduler, text_splitter: TextSplitterService = None,
                 step_delay: float = None, retry_delay: float = None):
        self.openai_service = openai_service
        self.vector_service = VectorService(openai_service)
        self.scheduler = scheduler
        self.text_splitter = text_splitter or TextSplitterService(
            chunk_size=settings.RESUME_CHUNK_SIZE,
            lookahead=settings.RESUME_CHUNK_LOOKAHEAD,
            window_size=settings.RESUME_CHUNK_WINDOW,
        )
        self.step_delay = settings.RESUME_PIPELINE_STEP_DELAY if step_delay is None else step_delay
        self.retry_delay = settings.RESUME_PIPELINE_RETRY_DELAY if retry_delay is None else retry_delay
        if self.retry_delay <= self.step_delay:
            raise ValueError("retry_delay must be longer than step_delay")

    def start(self, resume: Resume) -> StepTicket:
        """Checkpoint the resume at the beginning of its text and schedule the first step."""
        ChunkingProgress.objects.update_or_create(
            resume=resume,
            defaults={'position': 0, 'chunk_index': 0, 'is_complete': False},
        )
        ticket = StepTicket(str(resume.id), 0, 0)
        logger.info(f"Starting embedding pipeline for resume {resume.id} ({len(resume.content)} chars)")
        self.scheduler.schedule(0, ticket)
        return ticket

    def recover(self) -> int:
        """Reschedule every resume whose checkpoint is not complete. Returns how many."""
        count = 0
        for progress in ChunkingProgress.objects.filter(is_complete=False).order_by('updated_at'):
            ticket = StepTicket(str(progress.resume_id), progress.position, progress.chunk_index)
            logger.info(f"Resuming resume {progress.resume_id} at position {progress.position}, "
                        f"chunk {progress.chunk_index}")
            self.scheduler.schedule(0, ticket)
            count += 1
        return count

    def step(self, ticket: StepTicket) -> StepOutcome:
        """
        Run one step for ``ticket`` and schedule at most one follow-up.

        Any error (remote call, bad embedding, database) leaves the checkpoint
        where it was and schedules the same ticket again after ``retry_delay``.
        """
        try:
            return self._run_step(ticket)
        except Exception as e:
            logger.error(f"Error processing chunk {ticket.chunk_index} of resume {ticket.resume_id} "
                         f"at position {ticket.position}: {e}", exc_info=True)
            self.scheduler.schedule(self.retry_delay, ticket)
            return StepOutcome.RETRYING

    def _run_step(self, ticket: StepTicket) -> StepOutcome:
        resume = Resume.objects.filter(id=ticket.resume_id).first()
        if resume is None:
            logger.info(f"Resume {ticket.resume_id} no longer exists, dropping pipeline step")
            return StepOutcome.ABANDONED

        progress = ChunkingProgress.objects.filter(resume=resume).first()
        if not self._matches(progress, ticket):
            logger.warning(f"Ignoring stale step for resume {ticket.resume_id} at position {ticket.position}")
            return StepOutcome.STALE

        text = resume.content
        if ticket.position >= len(text):
            self._advance(ticket, ticket.position, ticket.chunk_index, is_complete=True)
            logger.info(f"Completed chunking for resume {resume.id} with {ticket.chunk_index} chunks")
            return StepOutcome.COMPLETED

        segment = self.text_splitter.next_chunk(text, ticket.position)

        if not segment.text:
            if self._advance(ticket, segment.new_cursor, ticket.chunk_index):
                self.scheduler.schedule(self.step_delay, StepTicket(ticket.resume_id, segment.new_cursor, ticket.chunk_index))
                return StepOutcome.SKIPPED
            return StepOutcome.STALE

        embedding = self.openai_service.create_embedding(segment.text)
        outcome = self._store(ticket, segment.text, segment.new_cursor, embedding)

        if outcome is StepOutcome.STORED:
            logger.info(f"Processed chunk {ticket.chunk_index} of resume {ticket.resume_id} "
                        f"at position {ticket.position} ({len(segment.text)} chars)")
            self.scheduler.schedule(
                self.step_delay,
                StepTicket(ticket.resume_id, segment.new_cursor, ticket.chunk_index + 1),
            )
        return outcome

    def _store(self, ticket: StepTicket, chunk_text: str, new_position: int, embedding) -> StepOutcome:
        with transaction.atomic():
            resume = Resume.objects.filter(id=ticket.resume_id).first()
            if resume is None:
                logger.info(f"Resume {ticket.resume_id} was deleted while embedding, discarding chunk")
                return StepOutcome.ABANDONED
            if not self._advance(ticket, new_position, ticket.chunk_index + 1):
                return StepOutcome.STALE
            self.vector_service.store_chunk(resume, chunk_text, ticket.chunk_index, embedding)
        return StepOutcome.STORED

    @staticmethod
    def _matches(progress, ticket: StepTicket) -> bool:
        return (
            progress is not None
            and not progress.is_complete
            and progress.position == ticket.position
            and progress.chunk_index == ticket.chunk_index
        )

    @staticmethod
    def _advance(ticket: StepTicket, position: int, chunk_index: int, is_complete: bool = False) -> bool:
        """Compare-and-set the checkpoint from the ticket's state. False if someone else moved it."""
        updated = ChunkingProgress.objects.filter(
            resume_id=ticket.resume_id,
            position=ticket.position,
            chunk_index=ticket.chunk_index,
            is_complete=False,
        ).update(
            position=position,
            chunk_index=chunk_index,
            is_complete=is_complete,
            updated_at=timezone.now(),
        )
        return updated == 1
