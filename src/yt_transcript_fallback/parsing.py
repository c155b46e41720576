"""
parsing.py — Turning upstream payloads into CaptionEntry lists.

YouTube hands captions back in a few shapes, none of which it documents:

    1. Timed-text XML  — <text start="1.5" dur="2.25">Hi &amp; bye</text>
    2. Innertube cue groups — transcriptCueGroupRenderer objects inside the
       get_transcript response or the watch page's engagement panels.
    3. JSON blobs embedded in the watch page HTML (ytInitialPlayerResponse,
       ytInitialData, bare "captionTracks" arrays).

Every function here is tolerant: malformed input produces an empty result
or None, never an exception, because "nothing parsed" is exactly the signal
strategies use to fall through to their next approach.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

from yt_transcript_fallback.models import CaptionEntry

# ---------------------------------------------------------------------------
# Entity decoding
# ---------------------------------------------------------------------------

# Applied in this exact order; "&amp;" goes first.
_NAMED_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&apos;", "'"),
)

_HEX_REF = re.compile(r"&#x([0-9a-f]+);", re.IGNORECASE)
_DEC_REF = re.compile(r"&#(\d+);")

# UTF-16 halves produced by references such as "&#55357;&#56832;".
_SURROGATE_PAIR = re.compile("[\ud800-\udbff][\udc00-\udfff]")
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _code_point(match: re.Match[str], base: int) -> str:
    """Replace a numeric reference, leaving it untouched if out of range."""
    try:
        return chr(int(match.group(1), base))
    except (ValueError, OverflowError):
        return match.group(0)


def _join_surrogates(text: str) -> str:
    """Combine surrogate pairs into one character; re-escape unpaired halves."""
    text = _SURROGATE_PAIR.sub(
        lambda m: m.group(0).encode("utf-16", "surrogatepass").decode("utf-16"),
        text,
    )
    return _LONE_SURROGATE.sub(lambda m: f"&#{ord(m.group(0))};", text)


def decode_entities(text: str) -> str:
    """
    Replace HTML/XML character references with literal characters.

    Named entities (amp, lt, gt, quot, apos) are replaced first, then hex
    references, then decimal references.  References spelling a UTF-16
    surrogate pair become the single character they encode; an unpaired
    half stays a reference.  Anything else that looks like an entity is
    left as-is.

    Args:
        text: Raw text, possibly entity-encoded.

    Returns:
        The decoded text.
    """
    for entity, char in _NAMED_ENTITIES:
        text = text.replace(entity, char)
    text = _HEX_REF.sub(lambda m: _code_point(m, 16), text)
    text = _DEC_REF.sub(lambda m: _code_point(m, 10), text)
    return _join_surrogates(text)


# ---------------------------------------------------------------------------
# Timed-text XML
# ---------------------------------------------------------------------------

_TEXT_ELEMENT = re.compile(r"<text\b([^>]*)>([\s\S]*?)</text>", re.IGNORECASE)
_SELF_CLOSING_TEXT = re.compile(r"<text\b([^>]*?)/>", re.IGNORECASE)
_START_ATTR = re.compile(r"\bstart\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_DUR_ATTR = re.compile(r"\bdur\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_INNER_TAG = re.compile(r"<[^>]+>")


def seconds_to_ms(raw: str | float | None) -> int:
    """
    Convert a seconds value (string or number) to whole milliseconds.

    Rounds half up, clamps negatives to zero and maps anything unparsable
    (None, "", "abc", NaN) to zero.
    """
    try:
        seconds = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(seconds) or seconds <= 0:
        return 0
    return int(math.floor(seconds * 1000 + 0.5))


def _attr(pattern: re.Pattern[str], attrs: str) -> str | None:
    match = pattern.search(attrs)
    return match.group(1) if match else None


def parse_caption_xml(markup: str | None) -> list[CaptionEntry]:
    """
    Parse timed-text markup into caption entries, in document order.

    Uses a regex scan rather than an XML parser so truncated or slightly
    broken documents still yield whatever complete <text> elements they
    contain.

    Args:
        markup: The raw response body of a timed-text / caption track URL.

    Returns:
        One CaptionEntry per <text> element.  Empty when there are none.
    """
    if not markup:
        return []

    entries: list[CaptionEntry] = []
    for match in _TEXT_ELEMENT.finditer(markup):
        attrs, inner = match.group(1), match.group(2)
        # Strip markup such as <font> before decoding so "&lt;" survives.
        inner = _INNER_TAG.sub("", inner)
        entries.append(
            CaptionEntry(
                text=decode_entities(inner),
                offset_ms=seconds_to_ms(_attr(_START_ATTR, attrs)),
                duration_ms=seconds_to_ms(_attr(_DUR_ATTR, attrs)),
            )
        )

    if entries:
        return entries

    # Documents made only of empty <text .../> elements still count.
    return [
        CaptionEntry(
            text="",
            offset_ms=seconds_to_ms(_attr(_START_ATTR, m.group(1))),
            duration_ms=seconds_to_ms(_attr(_DUR_ATTR, m.group(1))),
        )
        for m in _SELF_CLOSING_TEXT.finditer(markup)
    ]


_SRV3_PARAGRAPH = re.compile(r"<p\b([^>]*)>([\s\S]*?)</p>", re.IGNORECASE)
_T_ATTR = re.compile(r"\bt\s*=\s*[\"'](\d+)[\"']")
_D_ATTR = re.compile(r"\bd\s*=\s*[\"'](\d+)[\"']")


def parse_srv3(markup: str | None) -> list[CaptionEntry]:
    """
    Parse the srv3 timed-text variant (<p t="ms" d="ms">...</p>).

    Times are already in milliseconds.  Paragraphs with only whitespace are
    line-break fillers in auto-generated tracks and are skipped.
    """
    if not markup:
        return []

    entries = []
    for match in _SRV3_PARAGRAPH.finditer(markup):
        attrs = match.group(1)
        text = decode_entities(_INNER_TAG.sub("", match.group(2)))
        if not text.strip():
            continue
        entries.append(
            CaptionEntry(
                text=text,
                offset_ms=_int_or_zero(_attr(_T_ATTR, attrs)),
                duration_ms=_int_or_zero(_attr(_D_ATTR, attrs)),
            )
        )
    return entries


# ---------------------------------------------------------------------------
# Innertube transcript cue groups
# ---------------------------------------------------------------------------

def _int_or_zero(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def runs_text(node: Any) -> str:
    """Read a YouTube "text" node: either simpleText or a list of runs."""
    if not isinstance(node, dict):
        return ""
    if isinstance(node.get("simpleText"), str):
        return node["simpleText"]
    runs = node.get("runs")
    if isinstance(runs, list):
        return "".join(run.get("text", "") for run in runs if isinstance(run, dict))
    return ""


def parse_transcript_cues(cue_groups: Any) -> list[CaptionEntry]:
    """
    Convert innertube transcriptCueGroupRenderer items into caption entries.

    Only the first cue of each group is used, matching what the web client
    shows.  Groups missing the expected structure are skipped.

    Args:
        cue_groups: The `cueGroups` list from a transcriptBodyRenderer.

    Returns:
        Caption entries in source order; empty if nothing usable was found.
    """
    if not isinstance(cue_groups, list):
        return []

    entries: list[CaptionEntry] = []
    for group in cue_groups:
        try:
            cue = group["transcriptCueGroupRenderer"]["cues"][0]["transcriptCueRenderer"]
        except (KeyError, IndexError, TypeError):
            continue
        entries.append(
            CaptionEntry(
                text=runs_text(cue.get("cue")),
                offset_ms=_int_or_zero(cue.get("startOffsetMs")),
                duration_ms=_int_or_zero(cue.get("durationMs")),
            )
        )
    return entries


# ---------------------------------------------------------------------------
# Embedded JSON in watch-page HTML
# ---------------------------------------------------------------------------

_DECODER = json.JSONDecoder()


def dig(data: Any, *path: str | int) -> Any:
    """
    Walk nested dicts/lists, returning None as soon as a step is missing.

    dig(resp, "captions", "playerCaptionsTracklistRenderer", "captionTracks")
    """
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


def find_json_blob(html: str | None, name: str) -> dict[str, Any] | None:
    """
    Locate `name = {...}` in page source and decode the object.

    Handles the `var ytInitialData = {...}` and `window["ytInitialData"] =
    {...}` spellings.  Decoding starts at the opening brace and stops where
    the JSON value ends, so trailing script text doesn't matter.

    Args:
        html: The watch page HTML.
        name: Variable name, e.g. "ytInitialPlayerResponse".

    Returns:
        The decoded object, or None when absent or not valid JSON.
    """
    if not html:
        return None

    pattern = re.compile(re.escape(name) + r"[\"']?\]?\s*=\s*(?=\{)")
    for match in pattern.finditer(html):
        try:
            value, _ = _DECODER.raw_decode(html, match.end())
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None


def _unescape_js(fragment: str) -> str:
    return fragment.replace('\\"', '"').replace("\\\\", "\\").replace("\\/", "/")


def find_json_array(html: str | None, key: str) -> list[Any] | None:
    """
    Locate `"key": [...]` anywhere in page source and decode the array.

    Also recovers arrays that appear inside a JS string literal with escaped
    quotes (`\\"captionTracks\\":[...]`).

    Returns:
        The decoded list, or None when absent or undecodable.
    """
    if not html:
        return None

    plain = re.compile(r'"' + re.escape(key) + r'"\s*:\s*(?=\[)')
    for match in plain.finditer(html):
        try:
            value, _ = _DECODER.raw_decode(html, match.end())
        except json.JSONDecodeError:
            continue
        if isinstance(value, list):
            return value

    escaped = re.compile(r'\\"' + re.escape(key) + r'\\"\s*:\s*(?=\[)')
    for match in escaped.finditer(html):
        fragment = _unescape_js(html[match.end():])
        try:
            value, _ = _DECODER.raw_decode(fragment)
        except json.JSONDecodeError:
            continue
        if isinstance(value, list):
            return value
    return None


def find_config_value(html: str | None, key: str) -> str | None:
    """Return the first `"KEY":"value"` string in page source, if any."""
    if not html:
        return None
    match = re.search(r'"' + re.escape(key) + r'"\s*:\s*"([^"]+)"', html)
    return match.group(1) if match else None
