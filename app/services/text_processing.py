"""
Text processing strategies for article content.

A ``TextProcessor`` turns raw article content into an improved body and a
short plain-text summary for list views. The shipped ``MockTextProcessor`` is
a deterministic string transform; a language-model backed processor can be
registered under another name and selected with the ``TEXT_PROCESSOR`` setting.
"""

import re
from abc import ABC, abstractmethod
from typing import Any

from app.core.logging import get_logger
from app.core.settings import Settings

logger = get_logger(__name__)

IMPROVED_MARKER = "[AI Improved] "
SUMMARY_MAX_LENGTH = 200
ELLIPSIS = "..."

# Python's whitespace set: includes the \x1c-\x1f separators and \x85 (NEL)
_WHITESPACE_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]*>")

# Applied in order; anything outside this table is left verbatim.
_ENTITY_REPLACEMENTS = (
    (re.compile(r"&nbsp;", re.IGNORECASE), " "),
    (re.compile(r"&amp;", re.IGNORECASE), "&"),
    (re.compile(r"&lt;", re.IGNORECASE), "<"),
    (re.compile(r"&gt;", re.IGNORECASE), ">"),
    (re.compile(r"&quot;", re.IGNORECASE), '"'),
    (re.compile(r"&#39;", re.IGNORECASE), "'"),
)


def _is_blank(content: Any) -> bool:
    return not isinstance(content, str) or not content.strip()


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs into single spaces and trim the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_tags(text: str) -> str:
    """Replace every angle-bracket tag with a single space."""
    return _TAG_RE.sub(" ", text)


def decode_entities(text: str) -> str:
    """Decode the small fixed set of named HTML entities."""
    for pattern, replacement in _ENTITY_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text


def truncate(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Cut text to ``max_length`` characters, ending in an ellipsis when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


class TextProcessor(ABC):
    """Strategy interface for content improvement and summary generation."""

    name: str = "base"

    @abstractmethod
    def improve(self, content: str) -> str:
        """Return an improved version of ``content``."""

    @abstractmethod
    def summarize(self, content: str) -> str:
        """Return a short plain-text summary of ``content``."""


class MockTextProcessor(TextProcessor):
    """
    Deterministic stand-in for a language-model service.

    ``improve`` normalizes whitespace and prepends a marker; ``summarize``
    strips tags, decodes a handful of entities, normalizes whitespace and
    truncates. Neither method raises: blank or non-string input comes back
    unchanged from ``improve`` and as ``""`` from ``summarize``.
    """

    name = "mock"

    def __init__(
        self,
        marker: str = IMPROVED_MARKER,
        max_summary_length: int = SUMMARY_MAX_LENGTH,
    ):
        self.marker = marker
        self.max_summary_length = max_summary_length

    def improve(self, content: str) -> str:
        if _is_blank(content):
            return content
        return f"{self.marker}{collapse_whitespace(content)}"

    def summarize(self, content: str) -> str:
        if _is_blank(content):
            return ""
        plain_text = collapse_whitespace(decode_entities(strip_tags(content)))
        return truncate(plain_text, self.max_summary_length)


class TextProcessorRegistry:
    """Registry of text processor factories keyed by name."""

    def __init__(self):
        self._factories: dict[str, type[TextProcessor]] = {}

    def register(self, processor_cls: type[TextProcessor]):
        self._factories[processor_cls.name] = processor_cls
        logger.debug(f"Registered text processor: {processor_cls.__name__}")

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, settings: Settings) -> TextProcessor:
        """Build the processor selected by ``settings.text_processor``."""
        processor_cls = self._factories.get(settings.text_processor)
        if processor_cls is None:
            raise ValueError(
                f"Unknown text processor '{settings.text_processor}'. "
                f"Available: {', '.join(self.names())}"
            )
        return processor_cls(
            marker=settings.improved_marker,
            max_summary_length=settings.summary_max_length,
        )


registry = TextProcessorRegistry()
registry.register(MockTextProcessor)


def build_text_processor(settings: Settings) -> TextProcessor:
    processor = registry.create(settings)
    logger.info(f"Using text processor: {processor.__class__.__name__}")
    return processor
