"""Locate the most plausible JSON payload inside free-form provider text."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from app.services.recovery_errors import DEFAULT_PREFIX_CHARS, NoPayloadFound


logger = logging.getLogger(__name__)

# ```json ... ``` (language tag optional, closing fence required)
_FENCED_BLOCK = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?(?P<body>.*?)```", re.DOTALL)
_TRAILING_FENCE = re.compile(r"\s*(?:```)?\s*\Z")


class PayloadKind(str, Enum):
    """Discriminant of a located payload."""

    OBJECT = "object"
    ARRAY = "array"

    @property
    def opener(self) -> str:
        return "{" if self is PayloadKind.OBJECT else "["

    @property
    def closer(self) -> str:
        return "}" if self is PayloadKind.OBJECT else "]"


@dataclass(frozen=True)
class LocatedSpan:
    """Candidate payload boundaries as offsets into the raw response.

    ``end`` is exclusive. A span is only a candidate: the text it brackets
    is not guaranteed to be valid JSON until the repairer has parsed it.
    ``truncated`` is set when no closing character exists after the opener,
    in which case the span runs to the end of the usable text.
    """

    start: int
    end: int
    kind: PayloadKind
    truncated: bool = False

    def extract(self, raw: str) -> str:
        return raw[self.start : self.end]

    def __len__(self) -> int:
        return self.end - self.start


def _search_bounds(raw: str) -> tuple[int, int]:
    """Restrict the search to the first fenced block when it holds a payload."""

    match = _FENCED_BLOCK.search(raw)
    if match is not None:
        body = match.group("body")
        if "{" in body or "[" in body:
            return match.start("body"), match.end("body")

    # No usable fence: drop a dangling closing fence marker from the tail
    tail = _TRAILING_FENCE.search(raw)
    return 0, tail.start() if tail else len(raw)


def locate(raw: str, prefix_chars: int = DEFAULT_PREFIX_CHARS) -> LocatedSpan:
    """Find the payload span inside ``raw``.

    The first ``{`` or ``[`` (whichever comes first) decides the kind; the
    last matching closing character ends the span.

    Raises:
        NoPayloadFound: if there is no opening bracket, or the only matching
            closing characters sit before the opener.
    """

    if not raw:
        raise NoPayloadFound("Provider response was empty", raw, prefix_chars)

    lo, hi = _search_bounds(raw)
    object_at = raw.find("{", lo, hi)
    array_at = raw.find("[", lo, hi)
    openings = [index for index in (object_at, array_at) if index >= 0]
    if not openings:
        raise NoPayloadFound("No JSON object or array found in provider response", raw, prefix_chars)

    start = min(openings)
    kind = PayloadKind.OBJECT if start == object_at else PayloadKind.ARRAY

    close_at = raw.rfind(kind.closer, start, hi)
    if close_at < 0:
        if raw.find(kind.closer, lo, start) >= 0:
            raise NoPayloadFound(
                f"Closing '{kind.closer}' precedes the opening '{kind.opener}'",
                raw,
                prefix_chars,
            )
        span = LocatedSpan(start=start, end=hi, kind=kind, truncated=True)
    else:
        span = LocatedSpan(start=start, end=close_at + 1, kind=kind)

    if span.end <= span.start:
        raise NoPayloadFound("Located payload span is empty", raw, prefix_chars)

    logger.debug(
        "Located %s payload | start=%d end=%d truncated=%s",
        span.kind.value,
        span.start,
        span.end,
        span.truncated,
    )
    return span


def extract_candidate(raw: str, prefix_chars: int = DEFAULT_PREFIX_CHARS) -> str:
    """Shortcut returning the candidate substring rather than the span."""

    return locate(raw, prefix_chars).extract(raw)
