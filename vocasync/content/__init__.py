"""Document source: content collections and narratable text."""

from .loader import ContentItem, load_content
from .speech import SpeechDocument, build_speech_document, compute_hash, has_changed

__all__ = [
    "ContentItem",
    "SpeechDocument",
    "build_speech_document",
    "compute_hash",
    "has_changed",
    "load_content",
]
