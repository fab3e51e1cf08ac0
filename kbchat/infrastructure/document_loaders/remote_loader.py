import logging

import httpx

from kbchat.core.exceptions import ExtractionError

from .pdf_loader import PDFLoader

logger = logging.getLogger(__name__)


class RemotePDFLoader:
    """Download a PDF over HTTP and extract its text."""

    def __init__(self, timeout: float = 60.0, pdf_loader: PDFLoader | None = None):
        self._timeout = timeout
        self._pdf_loader = pdf_loader or PDFLoader()

    def load(self, url: str) -> str:
        logger.info(f"Downloading {url}")
        try:
            resp = httpx.get(url, timeout=self._timeout, follow_redirects=True)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ExtractionError(f"Download failed: {e}", details=url) from e

        content_type = resp.headers.get("content-type", "")
        if "pdf" not in content_type:
            logger.warning(f"Remote file may not be a PDF (content-type: {content_type})")

        name = url.rstrip("/").rsplit("/", 1)[-1] or "document.pdf"
        return self._pdf_loader.load_bytes(resp.content, name=name)
