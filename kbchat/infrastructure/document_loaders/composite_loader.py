import logging
from pathlib import Path

from kbchat.core.exceptions import ExtractionError

from .pdf_loader import PDFLoader
from .docx_loader import DocxLoader
from .text_loader import TextLoader

logger = logging.getLogger(__name__)


class CompositeLoader:

    def __init__(self):
        self._loaders = [
            PDFLoader(),
            DocxLoader(),
            TextLoader(),
        ]

    def supports(self, file_path: Path) -> bool:
        return any(loader.supports(file_path) for loader in self._loaders)

    def load(self, file_path: Path) -> str:
        if not file_path.exists():
            raise ExtractionError(f"File not found: {file_path}", details=file_path.name)

        for loader in self._loaders:
            if loader.supports(file_path):
                text = loader.load(file_path)
                logger.info(f"Extracted {len(text)} chars from {file_path.name}")
                return text

        raise ExtractionError(
            f"Unsupported file type: {file_path.suffix}", details=file_path.name
        )
