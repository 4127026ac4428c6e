"""Progressive repair of malformed JSON produced by a text provider.

The repairer is a fixed ladder of pure string transforms. The candidate is
parsed as-is first; on failure each step is applied on top of the previous
result and a parse is attempted again, stopping at the first success.
There is no backtracking: worst-case work is steps x len(candidate).

Ladder order (it matters, later steps rely on earlier ones):

    a. strip_outer_garbage      text outside the first balanced structure
    b. quote_unquoted_keys      {name: 1} -> {"name": 1}
    c. normalize_single_quotes  'text' -> "text"
    d. remove_stray_commas      [1,] / {"a": 1,} / [,]
    e. strip_control_characters raw \\x00-\\x1f except whitespace
    f. escape_string_whitespace raw newline/tab/CR inside string literals
    g. close_unbalanced_arrays  append missing ']'
    h. close_unbalanced_objects append missing '}' (and anything nested)
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Union

from app.services.recovery_errors import DEFAULT_PREFIX_CHARS, Unparseable


logger = logging.getLogger(__name__)

GenericValue = Union[dict[str, Any], list[Any], str, int, float, bool, None]

_OPENERS = {"{": "}", "[": "]"}
_CLOSERS = {"}": "{", "]": "["}

_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][A-Za-z0-9_$\-]*)(\s*:)")
_REPEATED_COMMA = re.compile(r",(?:\s*,)+")
_LEADING_COMMA = re.compile(r"([\[{])\s*,")
_TRAILING_COMMA = re.compile(r",\s*(?=[}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufeff]")
_STRING_WHITESPACE = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_TRAILING_BARE_TOKEN = re.compile(r"[A-Za-z0-9.+\-]+$")
_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = ("true", "false", "null")


# ---------------------------------------------------------------------------
# Generic parser
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json(text: str) -> GenericValue:
    """Strict JSON parse: no comments, no NaN/Infinity, standard escapes only."""

    return json.loads(text, parse_constant=_reject_constant)


# ---------------------------------------------------------------------------
# Scanning helpers
# ---------------------------------------------------------------------------


def _scan_string(text: str, start: int) -> tuple[int, bool]:
    """Return the index just past the literal opened at ``start`` and whether it closed."""

    quote = text[start]
    index = start + 1
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == quote:
            return index + 1, True
        index += 1
    return length, False


def _string_end(text: str, start: int) -> int:
    return _scan_string(text, start)[0]


def _segments(text: str, quotes: str = '"') -> Iterator[tuple[bool, str]]:
    """Split ``text`` into ``(is_string, chunk)`` pieces."""

    index = 0
    plain_start = 0
    length = len(text)
    while index < length:
        if text[index] in quotes:
            if plain_start < index:
                yield False, text[plain_start:index]
            end = _string_end(text, index)
            yield True, text[index:end]
            index = plain_start = end
        else:
            index += 1
    if plain_start < length:
        yield False, text[plain_start:]


def _map_outside_strings(text: str, transform: Callable[[str], str], quotes: str = '"') -> str:
    return "".join(chunk if is_string else transform(chunk) for is_string, chunk in _segments(text, quotes))


def _open_structure(text: str) -> tuple[list[str], bool]:
    """Return the stack of unclosed openers and whether text ends inside a string."""

    stack: list[str] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == '"':
            end, closed = _scan_string(text, index)
            if not closed:
                return stack, True
            index = end
            continue
        if char in _OPENERS:
            stack.append(char)
        elif char in _CLOSERS and stack and stack[-1] == _CLOSERS[char]:
            stack.pop()
        index += 1
    return stack, False


def _trailing_string_start(text: str) -> int:
    """Start index of a string literal that runs to the end of ``text``, else -1."""

    index = 0
    length = len(text)
    while index < length:
        if text[index] == '"':
            end = _string_end(text, index)
            if end >= length:
                return index
            index = end
        else:
            index += 1
    return -1


def _drop_partial_literal(text: str) -> str:
    """Cut a bare token the truncation left unfinished (``tr``, ``1.``, ``-``)."""

    match = _TRAILING_BARE_TOKEN.search(text)
    if match is None:
        return text
    token = match.group(0)
    if token in _LITERALS or _JSON_NUMBER.fullmatch(token):
        return text
    shortened = token.rstrip(".eE+-")
    if shortened and _JSON_NUMBER.fullmatch(shortened):
        return text[: match.start()] + shortened
    return text[: match.start()].rstrip()


def _trim_dangling(text: str, in_string: bool, innermost: str) -> str:
    """Prepare truncated text for closing.

    Finishes an open string, cuts an unfinished bare literal, drops an
    object key that never got its value, then removes a dangling comma or
    fills a dangling colon with ``null``.
    """

    if in_string:
        trailing = len(text) - len(text.rstrip("\\"))
        if trailing % 2:
            text = text[:-1]
        text += '"'
    text = _drop_partial_literal(text.rstrip())
    if innermost == "{" and text.endswith('"'):
        start = _trailing_string_start(text)
        before = text[:start].rstrip()
        if start >= 0 and before.endswith(("{", ",")):
            text = before
    if text.endswith(","):
        text = text[:-1].rstrip()
    elif text.endswith(":"):
        text += " null"
    return text


# ---------------------------------------------------------------------------
# Repair steps
# ---------------------------------------------------------------------------


def strip_outer_garbage(text: str) -> str:
    """Keep only the first balanced object/array, dropping text around it."""

    starts = [index for index in (text.find("{"), text.find("[")) if index >= 0]
    if not starts:
        return text.strip()
    start = min(starts)

    depth = 0
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char in "\"'":
            index = _string_end(text, index)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
        index += 1
    return text[start:].rstrip()


def quote_unquoted_keys(text: str) -> str:
    """Wrap bare identifier keys in double quotes."""

    def _quote(chunk: str) -> str:
        return _UNQUOTED_KEY.sub(r'\1"\2"\3', chunk)

    return _map_outside_strings(text, _quote, quotes="\"'")


def _next_significant(text: str, index: int) -> str:
    """First non-whitespace character at or after ``index`` ('' at end)."""

    length = len(text)
    while index < length and text[index].isspace():
        index += 1
    return text[index] if index < length else ""


def _closing_single_quote(text: str, start: int) -> int:
    """Find the quote that closes a single-quoted literal, or -1.

    A closing quote must be followed by a structural character so that
    apostrophes inside the literal (``'don't'``) are kept.
    """

    index = start + 1
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "'" and _next_significant(text, index + 1) in ("", ",", "}", "]", ":"):
            return index
        index += 1
    return -1


def normalize_single_quotes(text: str) -> str:
    """Convert single-quoted string literals to double-quoted ones."""

    out: list[str] = []
    last_significant = ""
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == '"':
            end = _string_end(text, index)
            out.append(text[index:end])
            last_significant = '"'
            index = end
            continue
        if char == "'" and last_significant in ("", "{", "[", ",", ":"):
            close = _closing_single_quote(text, index)
            if close >= 0:
                inner = text[index + 1 : close].replace("\\'", "'")
                inner = re.sub(r'(?<!\\)"', r'\\"', inner)
                out.append(f'"{inner}"')
                last_significant = '"'
                index = close + 1
                continue
        out.append(char)
        if not char.isspace():
            last_significant = char
        index += 1
    return "".join(out)


def remove_stray_commas(text: str) -> str:
    """Drop trailing, leading and doubled commas inside containers."""

    def _clean(chunk: str) -> str:
        chunk = _REPEATED_COMMA.sub(",", chunk)
        chunk = _LEADING_COMMA.sub(r"\1", chunk)
        return _TRAILING_COMMA.sub("", chunk)

    return _map_outside_strings(text, _clean)


def strip_control_characters(text: str) -> str:
    """Remove raw control characters other than newline, tab and CR."""

    return _CONTROL_CHARS.sub("", text)


def escape_string_whitespace(text: str) -> str:
    """Escape raw newlines, tabs and carriage returns inside string literals."""

    pieces = []
    for is_string, chunk in _segments(text):
        if is_string:
            chunk = "".join(_STRING_WHITESPACE.get(char, char) for char in chunk)
        pieces.append(chunk)
    return "".join(pieces)


def close_unbalanced_arrays(text: str) -> str:
    """Append ']' for arrays left open at the innermost nesting levels."""

    stack, in_string = _open_structure(text)
    if not stack or stack[-1] != "[":
        return text
    closers = []
    while stack and stack[-1] == "[":
        stack.pop()
        closers.append("]")
    return _trim_dangling(text, in_string, "[") + "".join(closers)


def close_unbalanced_objects(text: str) -> str:
    """Append the closers for every structure still open, objects included."""

    stack, in_string = _open_structure(text)
    if not stack:
        return text
    closers = "".join(_OPENERS[opener] for opener in reversed(stack))
    return _trim_dangling(text, in_string, stack[-1]) + closers


@dataclass(frozen=True)
class RepairStep:
    """One named, pure transform of the repair ladder."""

    name: str
    apply: Callable[[str], str]


REPAIR_STEPS: tuple[RepairStep, ...] = (
    RepairStep("strip_outer_garbage", strip_outer_garbage),
    RepairStep("quote_unquoted_keys", quote_unquoted_keys),
    RepairStep("normalize_single_quotes", normalize_single_quotes),
    RepairStep("remove_stray_commas", remove_stray_commas),
    RepairStep("strip_control_characters", strip_control_characters),
    RepairStep("escape_string_whitespace", escape_string_whitespace),
    RepairStep("close_unbalanced_arrays", close_unbalanced_arrays),
    RepairStep("close_unbalanced_objects", close_unbalanced_objects),
)


@dataclass(frozen=True)
class RepairOutcome:
    """Successful parse plus the ladder position it took to get there."""

    value: GenericValue
    text: str
    steps_applied: tuple[str, ...]

    @property
    def step_count(self) -> int:
        return len(self.steps_applied)


def attempt_repairs(candidate: str, prefix_chars: int = DEFAULT_PREFIX_CHARS) -> RepairOutcome:
    """Run the repair ladder over ``candidate``.

    Raises:
        Unparseable: when the text still fails to parse after the last step.
    """

    try:
        return RepairOutcome(value=parse_json(candidate), text=candidate, steps_applied=())
    except (ValueError, RecursionError) as exc:
        last_error: Exception = exc

    text = candidate
    for position, step in enumerate(REPAIR_STEPS, start=1):
        repaired = step.apply(text)
        if repaired == text:
            # Nothing changed, the parse would fail the same way
            continue
        logger.debug("Repair step %d (%s) changed payload (%d -> %d chars)", position, step.name, len(text), len(repaired))
        text = repaired
        try:
            value = parse_json(text)
        except (ValueError, RecursionError) as exc:
            last_error = exc
            continue
        applied = tuple(s.name for s in REPAIR_STEPS[:position])
        logger.info("Recovered payload after %d repair step(s) | last=%s", position, step.name)
        return RepairOutcome(value=value, text=text, steps_applied=applied)

    raise Unparseable(
        f"Payload still unparseable after {len(REPAIR_STEPS)} repair steps: {last_error}",
        candidate,
        steps_reached=len(REPAIR_STEPS),
        last_step=REPAIR_STEPS[-1].name,
        last_attempt=text,
        prefix_chars=prefix_chars,
    )


def repair_and_parse(candidate: str, prefix_chars: int = DEFAULT_PREFIX_CHARS) -> GenericValue:
    """Return the generic value recovered from ``candidate``."""

    return attempt_repairs(candidate, prefix_chars).value
