from io import BytesIO
from pathlib import Path
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from kbchat.core.exceptions import ExtractionError, PasswordProtectedError


class PDFLoader:

    def supports(self, file_path: Path) -> bool:
        return file_path.suffix.lower() == ".pdf"

    def load(self, file_path: Path) -> str:
        try:
            with open(file_path, "rb") as f:
                return self.load_stream(f, name=file_path.name)
        except OSError as e:
            raise ExtractionError(str(e), details=file_path.name) from e

    def load_bytes(self, data: bytes, name: str = "document.pdf") -> str:
        return self.load_stream(BytesIO(data), name=name)

    def load_stream(self, stream: BinaryIO, name: str) -> str:
        try:
            reader = PdfReader(stream)
            # Owner-only encryption opens with an empty user password
            if reader.is_encrypted and not reader.decrypt(""):
                raise PasswordProtectedError(details=name)

            text_parts = []
            for page in reader.pages:
                text = page.extract_text()
                if text:
                    text_parts.append(text.strip())
        # pypdf also raises plain ValueError/KeyError on malformed files
        except (PyPdfError, ValueError, KeyError, OSError) as e:
            raise ExtractionError(str(e), details=name) from e

        return "\n\n".join(text_parts)
