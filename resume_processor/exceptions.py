class ResumeProcessingError(Exception):
    """Base class for errors raised by the resume ingestion and query services."""


class ResumeNotFound(ResumeProcessingError):
    def __init__(self, resume_id):
        self.resume_id = resume_id
        super().__init__(f"Resume {resume_id} not found")


class DimensionMismatch(ResumeProcessingError, ValueError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected vector of {expected} dimensions, got {actual}")


class RemoteCallFailure(ResumeProcessingError):
    """The embedding or completion provider failed. Assumed to be transient."""


class ExtractionFailure(ResumeProcessingError):
    """Text could not be read out of an uploaded file."""


class UnsupportedFileType(ExtractionFailure):
    def __init__(self, filename: str, content_type: str = ""):
        self.filename = filename
        self.content_type = content_type
        super().__init__(f"Unsupported file type: {content_type or filename}")
