from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command

from resume_processor.models import ChunkingProgress, ResumeChunk
from resume_processor.services.scheduler import InlineScheduler
from tests.fakes import FakeOpenAIService

pytestmark = pytest.mark.django_db


def test_drain_finishes_interrupted_resumes(make_resume):
    unfinished = make_resume("Skilled in Go and Rust.")
    ChunkingProgress.objects.create(resume=unfinished)
    finished = make_resume("Done.")
    ChunkingProgress.objects.create(resume=finished, position=5, chunk_index=0, is_complete=True)
    out = StringIO()

    with patch("resume_processor.management.commands.recover_resume_pipelines.OpenAIService",
               return_value=FakeOpenAIService()), \
            patch("resume_processor.management.commands.recover_resume_pipelines.real_time_scheduler",
                  return_value=InlineScheduler()):
        call_command("recover_resume_pipelines", "--drain", stdout=out)

    assert "Rescheduled 1 unfinished resume(s)" in out.getvalue()
    assert "Ran 2 pipeline step(s)" in out.getvalue()
    assert ResumeChunk.objects.filter(resume=unfinished).count() == 1
    assert ChunkingProgress.objects.get(resume=unfinished).is_complete


def test_without_drain_hands_steps_to_celery(make_resume):
    resume = make_resume("Skilled in Go and Rust.")
    ChunkingProgress.objects.create(resume=resume, position=0, chunk_index=0)
    out = StringIO()

    with patch("resume_processor.management.commands.recover_resume_pipelines.OpenAIService",
               return_value=FakeOpenAIService()), \
            patch("resume_processor.tasks.process_resume_step.apply_async") as apply_async:
        call_command("recover_resume_pipelines", stdout=out)

    apply_async.assert_called_once_with(args=(str(resume.id), 0, 0), countdown=0)
    assert "Rescheduled 1 unfinished resume(s)" in out.getvalue()
