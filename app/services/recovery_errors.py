"""Terminal failure kinds of the structured-data recovery pipeline."""
from __future__ import annotations

DEFAULT_PREFIX_CHARS = 300


def bounded_prefix(text: str | None, limit: int = DEFAULT_PREFIX_CHARS) -> str:
    """Return at most ``limit`` leading characters of ``text``."""

    if not text:
        return ""
    return text[: max(limit, 0)]


class RecoveryError(Exception):
    """Raised when no generic value could be recovered from a provider response.

    Only a bounded prefix of the raw text is retained so that failed
    responses never keep the full provider output alive.
    """

    kind = "recovery_error"

    def __init__(self, message: str, raw_text: str | None = None, prefix_chars: int = DEFAULT_PREFIX_CHARS):
        super().__init__(message)
        self.message = message
        self.raw_prefix = bounded_prefix(raw_text, prefix_chars)

    def to_detail(self) -> dict[str, object]:
        """Structured payload used by the HTTP layer."""

        return {
            "error": self.kind,
            "message": self.message,
            "raw_prefix": self.raw_prefix,
        }


class NoPayloadFound(RecoveryError):
    """The raw text contains no usable object or array boundaries."""

    kind = "no_payload_found"


class Unparseable(RecoveryError):
    """Every repair step was applied and the text still failed to parse."""

    kind = "unparseable"

    def __init__(
        self,
        message: str,
        raw_text: str | None = None,
        *,
        steps_reached: int,
        last_step: str | None = None,
        last_attempt: str | None = None,
        prefix_chars: int = DEFAULT_PREFIX_CHARS,
    ):
        super().__init__(message, raw_text, prefix_chars)
        self.steps_reached = steps_reached
        self.last_step = last_step
        self.last_attempt_prefix = bounded_prefix(last_attempt, prefix_chars)

    def to_detail(self) -> dict[str, object]:
        detail = super().to_detail()
        detail.update(
            {
                "steps_reached": self.steps_reached,
                "last_step": self.last_step,
                "last_attempt_prefix": self.last_attempt_prefix,
            }
        )
        return detail
