"""Document loader implementations."""
from .pdf_loader import PDFLoader
from .docx_loader import DocxLoader
from .text_loader import TextLoader
from .composite_loader import CompositeLoader
from .remote_loader import RemotePDFLoader

__all__ = ["PDFLoader", "DocxLoader", "TextLoader", "CompositeLoader", "RemotePDFLoader"]
