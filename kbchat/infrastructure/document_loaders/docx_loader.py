from pathlib import Path
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from kbchat.core.exceptions import ExtractionError


class DocxLoader:

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".docx"

    def load(self, file_path: Path) -> str:
        try:
            doc = Document(file_path)
        except (PackageNotFoundError, BadZipFile, KeyError, ValueError, OSError) as e:
            raise ExtractionError(str(e), details=file_path.name) from e
        paragraphs = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
        return "\n\n".join(paragraphs)
