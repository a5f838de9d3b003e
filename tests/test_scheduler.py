from unittest.mock import patch

import pytest

from resume_processor.models import ChunkingProgress, ResumeChunk
from resume_processor.services.embedding_pipeline import EmbeddingPipeline
from resume_processor.services.scheduler import (
    CeleryScheduler,
    InlineScheduler,
    StepTicket,
    get_scheduler,
)
from resume_processor.tasks import process_resume_step
from tests.fakes import FakeOpenAIService


def test_inline_scheduler_runs_tickets_in_due_order():
    scheduler = InlineScheduler()
    late = StepTicket("a", 0, 0)
    early = StepTicket("b", 0, 0)
    same_time = StepTicket("c", 0, 0)
    scheduler.schedule(2.0, late)
    scheduler.schedule(0.2, early)
    scheduler.schedule(0.2, same_time)

    seen = []
    assert scheduler.run(seen.append) == 3

    assert seen == [early, same_time, late]
    assert scheduler.clock == 2.0
    assert len(scheduler) == 0


def test_inline_scheduler_delays_are_relative_to_current_clock():
    scheduler = InlineScheduler()
    seen = []

    def step(ticket):
        seen.append((scheduler.clock, ticket.position))
        if ticket.position < 2:
            scheduler.schedule(0.5, StepTicket(ticket.resume_id, ticket.position + 1, 0))

    scheduler.schedule(1.0, StepTicket("a", 0, 0))
    scheduler.run(step)

    assert seen == [(1.0, 0), (1.5, 1), (2.0, 2)]


def test_inline_scheduler_max_steps_and_clear():
    scheduler = InlineScheduler()
    for i in range(3):
        scheduler.schedule(i, StepTicket("a", i, i))

    assert scheduler.run(lambda ticket: None, max_steps=2) == 2
    assert len(scheduler) == 1

    scheduler.clear()
    assert len(scheduler) == 0
    assert scheduler.history == []
    assert scheduler.clock == 0.0


def test_inline_scheduler_sleeps_for_real_when_asked():
    sleeps = []
    scheduler = InlineScheduler(sleep=sleeps.append)
    scheduler.schedule(0, StepTicket("a", 0, 0))
    scheduler.schedule(0.2, StepTicket("a", 1, 1))
    scheduler.schedule(2.0, StepTicket("a", 2, 2))

    scheduler.run(lambda ticket: None)

    assert sleeps == [0.2, pytest.approx(1.8)]


def test_celery_scheduler_passes_countdown():
    with patch.object(process_resume_step, "apply_async") as apply_async:
        CeleryScheduler().schedule(2.0, StepTicket("abc", 40, 3))

    apply_async.assert_called_once_with(args=("abc", 40, 3), countdown=2.0)


def test_get_scheduler_follows_settings(settings):
    settings.RESUME_PIPELINE_SCHEDULER = "inline"
    assert isinstance(get_scheduler(), InlineScheduler)
    assert get_scheduler() is not get_scheduler()

    settings.RESUME_PIPELINE_SCHEDULER = "celery"
    assert isinstance(get_scheduler(), CeleryScheduler)


@pytest.mark.django_db
def test_celery_task_runs_pipeline_to_completion(make_resume):
    resume = make_resume("Skilled in Go and Rust. Built payment services.")
    ChunkingProgress.objects.create(resume=resume)

    # Tasks run eagerly under the test settings, so each step's successor runs inline
    with patch("resume_processor.tasks.OpenAIService", return_value=FakeOpenAIService()):
        outcome = process_resume_step(str(resume.id), 0, 0)

    assert outcome == "stored"
    assert ResumeChunk.objects.filter(resume=resume).count() == 1
    assert ChunkingProgress.objects.get(resume=resume).is_complete


@pytest.mark.django_db
def test_inline_uploads_leave_no_queue_behind(settings, make_resume):
    settings.RESUME_PIPELINE_SCHEDULER = "inline"
    fake = FakeOpenAIService()
    schedulers = []
    for i in range(3):
        scheduler = get_scheduler()
        EmbeddingPipeline(fake, scheduler).start(make_resume(f"Resume {i}"))
        schedulers.append(scheduler)

    assert [len(s) for s in schedulers] == [1, 1, 1]
    assert len(get_scheduler()) == 0
    assert get_scheduler().history == []
    assert ChunkingProgress.objects.filter(is_complete=False).count() == 3
