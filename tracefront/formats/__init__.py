"""Trace line format: tags and tokenizer.

TraceReader lives in tracefront.formats.reader; it sits on top of the stream
layer and is imported from there (or from the top-level package).
"""

from .line_tags import LineTag, TAG_LENGTH, MEMORY_MARKER
from .tokenizer import LineTokenizer, next_token, normalize_token

__all__ = [
    'LineTag',
    'TAG_LENGTH',
    'MEMORY_MARKER',
    'LineTokenizer',
    'next_token',
    'normalize_token',
]
