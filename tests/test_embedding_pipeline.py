from unittest.mock import patch

import pytest
from django.db import DatabaseError

from resume_processor.models import ChunkingProgress, Resume, ResumeChunk
from resume_processor.services.embedding_pipeline import EmbeddingPipeline, StepOutcome
from resume_processor.services.scheduler import InlineScheduler, StepTicket
from resume_processor.services.text_splitter_service import TextSplitterService
from tests.fakes import FakeOpenAIService

pytestmark = pytest.mark.django_db

LONG_RESUME = "\n".join(
    f"Role {i}: Led a team of {i + 3} engineers, shipped payment services in Go and Rust, "
    f"cut latency by {10 + i}% and mentored new hires."
    for i in range(12)
)


def chunk_indices(resume):
    return list(ResumeChunk.objects.filter(resume=resume).order_by("chunk_index").values_list("chunk_index", flat=True))


def test_start_checkpoints_at_zero_and_schedules_first_step(pipeline, scheduler, make_resume):
    resume = make_resume("Hello world. This is a test.")

    ticket = pipeline.start(resume)

    progress = ChunkingProgress.objects.get(resume=resume)
    assert (progress.position, progress.chunk_index, progress.is_complete) == (0, 0, False)
    assert ticket == StepTicket(str(resume.id), 0, 0)
    assert scheduler.history == [(0, ticket)]
    assert resume.processing_status == Resume.STATUS_PROCESSING


def test_short_resume_yields_one_chunk_then_completes(pipeline, scheduler, make_resume):
    text = "Hello world. This is a test."
    resume = make_resume(text)
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.STORED
    chunk = ResumeChunk.objects.get(resume=resume)
    assert chunk.chunk_index == 0
    assert chunk.content == text
    assert not ChunkingProgress.objects.get(resume=resume).is_complete

    next_delay, next_ticket = scheduler.history[-1]
    assert next_delay == 0.2
    assert next_ticket == StepTicket(str(resume.id), len(text), 1)

    assert pipeline.step(next_ticket) is StepOutcome.COMPLETED
    progress = ChunkingProgress.objects.get(resume=resume)
    assert progress.is_complete
    assert progress.chunk_index == 1
    assert ResumeChunk.objects.filter(resume=resume).count() == 1
    assert Resume.objects.get(pk=resume.pk).processing_status == Resume.STATUS_PROCESSED


def test_long_resume_produces_contiguous_indices_in_text_order(pipeline, scheduler, make_resume):
    resume = make_resume(LONG_RESUME)
    pipeline.start(resume)

    scheduler.run(pipeline.step)

    expected = [segment.text for segment in TextSplitterService().iter_chunks(LONG_RESUME)]
    stored = list(ResumeChunk.objects.filter(resume=resume).order_by("chunk_index"))
    assert len(expected) > 3
    assert [c.content for c in stored] == expected
    assert chunk_indices(resume) == list(range(len(expected)))
    assert all(len(c.embedding) == 8 for c in stored)
    assert ChunkingProgress.objects.get(resume=resume).is_complete


def test_every_step_schedules_at_most_one_successor(pipeline, scheduler, make_resume):
    resume = make_resume(LONG_RESUME)
    pipeline.start(resume)

    while len(scheduler):
        assert len(scheduler) == 1
        scheduler.run(pipeline.step, max_steps=1)

    assert ChunkingProgress.objects.get(resume=resume).is_complete


def test_transient_embedding_failures_are_retried_from_same_position(make_resume):
    fake = FakeOpenAIService(embedding_failures=2)
    scheduler = InlineScheduler()
    pipeline = EmbeddingPipeline(fake, scheduler, step_delay=0.2, retry_delay=2.0)
    resume = make_resume("Skilled in Go and Rust.")
    first = pipeline.start(resume)

    assert pipeline.step(first) is StepOutcome.RETRYING
    progress = ChunkingProgress.objects.get(resume=resume)
    assert (progress.position, progress.chunk_index) == (0, 0)
    assert not ResumeChunk.objects.filter(resume=resume).exists()

    scheduler.run(pipeline.step)

    assert fake.embed_calls == ["Skilled in Go and Rust."] * 3
    assert chunk_indices(resume) == [0]
    assert ChunkingProgress.objects.get(resume=resume).is_complete
    delays = [delay for delay, _ in scheduler.history]
    assert delays == [0, 2.0, 2.0, 0.2]
    assert [ticket for _, ticket in scheduler.history[1:3]] == [first, first]


def test_retry_delay_must_exceed_step_delay(fake_openai, scheduler):
    with pytest.raises(ValueError):
        EmbeddingPipeline(fake_openai, scheduler, step_delay=2.0, retry_delay=2.0)


def test_wrong_embedding_dimension_is_not_persisted(scheduler, make_resume):
    text = "Skilled in Go and Rust."
    fake = FakeOpenAIService(embeddings={text: [1.0, 2.0, 3.0]})
    pipeline = EmbeddingPipeline(fake, scheduler, step_delay=0.2, retry_delay=2.0)
    resume = make_resume(text)
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.RETRYING

    progress = ChunkingProgress.objects.get(resume=resume)
    assert (progress.position, progress.chunk_index, progress.is_complete) == (0, 0, False)
    assert not ResumeChunk.objects.filter(resume=resume).exists()
    assert scheduler.history[-1] == (2.0, ticket)


def test_whitespace_run_is_skipped_without_consuming_an_index(pipeline, scheduler, make_resume):
    resume = make_resume(" " * 250 + "Rust")
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.SKIPPED
    progress = ChunkingProgress.objects.get(resume=resume)
    assert (progress.position, progress.chunk_index) == (201, 0)

    scheduler.run(pipeline.step)

    chunk = ResumeChunk.objects.get(resume=resume)
    assert (chunk.chunk_index, chunk.content) == (0, "Rust")


def test_empty_resume_completes_without_chunks(pipeline, scheduler, make_resume):
    resume = make_resume("")
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.COMPLETED
    assert ChunkingProgress.objects.get(resume=resume).is_complete
    assert not ResumeChunk.objects.filter(resume=resume).exists()
    assert scheduler.history == [(0, ticket)]


def test_duplicate_ticket_is_ignored(pipeline, scheduler, make_resume):
    resume = make_resume("Skilled in Go and Rust.")
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.STORED
    assert pipeline.step(ticket) is StepOutcome.STALE

    assert chunk_indices(resume) == [0]


def test_completed_resume_ignores_late_steps(pipeline, scheduler, make_resume):
    resume = make_resume("Skilled in Go and Rust.")
    pipeline.start(resume)
    scheduler.run(pipeline.step)

    late = StepTicket(str(resume.id), len(resume.content), 1)
    assert pipeline.step(late) is StepOutcome.STALE
    assert ChunkingProgress.objects.get(resume=resume).is_complete


def test_deleted_resume_abandons_scheduled_steps(pipeline, scheduler, make_resume):
    resume = make_resume(LONG_RESUME)
    pipeline.start(resume)
    scheduler.run(pipeline.step, max_steps=2)
    assert ResumeChunk.objects.filter(resume=resume).count() == 2

    resume_id = resume.id
    resume.delete()
    scheduled = len(scheduler.history)
    pending = scheduler.history[-1][1]

    assert pipeline.step(pending) is StepOutcome.ABANDONED
    assert scheduler.run(pipeline.step) == 1
    assert len(scheduler.history) == scheduled
    assert not ResumeChunk.objects.filter(resume_id=resume_id).exists()
    assert not ChunkingProgress.objects.filter(resume_id=resume_id).exists()


def test_resume_deleted_during_embedding_is_not_written(scheduler, make_resume):
    resume = make_resume("Skilled in Go and Rust.")

    class DeletingOpenAI(FakeOpenAIService):
        def create_embedding(self, text):
            Resume.objects.filter(pk=resume.pk).delete()
            return super().create_embedding(text)

    pipeline = EmbeddingPipeline(DeletingOpenAI(), scheduler, step_delay=0.2, retry_delay=2.0)
    ticket = pipeline.start(resume)

    assert pipeline.step(ticket) is StepOutcome.ABANDONED
    assert not ResumeChunk.objects.exists()
    assert scheduler.history == [(0, ticket)]


def test_recover_resumes_from_checkpoint_after_restart(fake_openai, make_resume):
    first = make_resume(LONG_RESUME, filename="first.txt")
    second = make_resume("Skilled in Go and Rust.", filename="second.txt")
    finished = make_resume("Done already.", filename="finished.txt")

    crashed_scheduler = InlineScheduler()
    crashed = EmbeddingPipeline(fake_openai, crashed_scheduler, step_delay=0.2, retry_delay=2.0)
    for resume in (first, second, finished):
        crashed.start(resume)
    crashed_scheduler.run(crashed.step, max_steps=6)
    checkpoint = ChunkingProgress.objects.get(resume=first)
    assert not checkpoint.is_complete
    assert ChunkingProgress.objects.get(resume=finished).is_complete

    scheduler = InlineScheduler()
    pipeline = EmbeddingPipeline(fake_openai, scheduler, step_delay=0.2, retry_delay=2.0)

    assert pipeline.recover() == 1
    assert scheduler.history[0][1] == StepTicket(str(first.id), checkpoint.position, checkpoint.chunk_index)

    scheduler.run(pipeline.step)

    expected = len(list(TextSplitterService().iter_chunks(LONG_RESUME)))
    assert chunk_indices(first) == list(range(expected))
    assert chunk_indices(second) == [0]
    assert all(p.is_complete for p in ChunkingProgress.objects.all())


def test_resumes_are_processed_independently(pipeline, scheduler, make_resume):
    first = make_resume(LONG_RESUME, filename="first.txt")
    second = make_resume(LONG_RESUME[:500], filename="second.txt")
    pipeline.start(first)
    pipeline.start(second)

    scheduler.run(pipeline.step)

    assert chunk_indices(first) == list(range(len(chunk_indices(first))))
    assert chunk_indices(second) == list(range(len(chunk_indices(second))))
    assert len(chunk_indices(second)) < len(chunk_indices(first))


def test_word_after_exact_chunk_of_whitespace_is_kept(pipeline, scheduler, make_resume):
    resume = make_resume(" " * 200 + "Kubernetes")
    pipeline.start(resume)

    scheduler.run(pipeline.step)

    assert list(ResumeChunk.objects.filter(resume=resume).values_list("content", flat=True)) == ["Kubernetes"]


def test_database_error_outside_embedding_is_retried(pipeline, scheduler, make_resume):
    resume = make_resume(" " * 250 + "Rust")
    ticket = pipeline.start(resume)

    with patch.object(EmbeddingPipeline, "_advance", side_effect=DatabaseError("database is locked")):
        assert pipeline.step(ticket) is StepOutcome.RETRYING

    assert scheduler.history[-1] == (2.0, ticket)
    progress = ChunkingProgress.objects.get(resume=resume)
    assert (progress.position, progress.chunk_index) == (0, 0)

    scheduler.run(pipeline.step)

    assert chunk_indices(resume) == [0]
    assert ChunkingProgress.objects.get(resume=resume).is_complete
