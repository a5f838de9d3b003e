import pytest

from tests.fakes import FakeOpenAIService


@pytest.fixture
def fake_openai():
    return FakeOpenAIService()


@pytest.fixture
def scheduler():
    from resume_processor.services.scheduler import InlineScheduler

    return InlineScheduler()


@pytest.fixture
def pipeline(fake_openai, scheduler):
    from resume_processor.services.embedding_pipeline import EmbeddingPipeline

    return EmbeddingPipeline(fake_openai, scheduler, step_delay=0.2, retry_delay=2.0)


@pytest.fixture
def resume_service(pipeline):
    from resume_processor.services.resume_service import ResumeService

    return ResumeService(pipeline)


@pytest.fixture
def make_resume():
    from resume_processor.models import Resume

    def _make_resume(content="", filename="resume.txt", content_type="text/plain"):
        return Resume.objects.create(filename=filename, content_type=content_type, content=content)

    return _make_resume
