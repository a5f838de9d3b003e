from io import BytesIO
import logging
from pathlib import Path

import docx
import PyPDF2

from ..exceptions import ExtractionFailure, UnsupportedFileType

logger = logging.getLogger(__name__)

PDF = 'application/pdf'
DOCX = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
TXT = 'text/plain'


class FileProcessorService:
    """Pulls plain text out of uploaded resume files."""

    def detect_format(self, filename: str, content_type: str = '') -> str:
        extension = Path(filename).suffix.lower()
        if content_type == PDF or extension == '.pdf':
            return PDF
        if content_type == DOCX or extension == '.docx':
            return DOCX
        if content_type == TXT or extension == '.txt':
            return TXT
        raise UnsupportedFileType(filename, content_type)

    def extract_text(self, filename: str, content_type: str, data: bytes) -> str:
        file_format = self.detect_format(filename, content_type)
        try:
            if file_format == PDF:
                text = self._extract_pdf(data)
            elif file_format == DOCX:
                text = self._extract_docx(data)
            else:
                text = data.decode('utf-8')
        except Exception as e:
            logger.error(f"Error extracting text from {filename}: {e}", exc_info=True)
            raise ExtractionFailure(f"Failed to extract text from {filename}") from e

        logger.info(f"Extracted {len(text)} characters from {filename}")
        return text.strip()

    def _extract_pdf(self, data: bytes) -> str:
        pdf_reader = PyPDF2.PdfReader(BytesIO(data))
        logger.info(f"PDF loaded with {len(pdf_reader.pages)} pages")
        pages = [page.extract_text() or '' for page in pdf_reader.pages]
        return '\n\n'.join(page.strip() for page in pages)

    def _extract_docx(self, data: bytes) -> str:
        document = docx.Document(BytesIO(data))
        return '\n'.join(paragraph.text for paragraph in document.paragraphs)
