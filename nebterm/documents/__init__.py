"""Generic documents: embedded-XML transcoding and dotted-path extraction."""

from nebterm.documents.extractor import MISSING, extract, extract_items
from nebterm.documents.transcoder import Document, transcode

__all__ = [
    "Document",
    "MISSING",
    "extract",
    "extract_items",
    "transcode",
]
