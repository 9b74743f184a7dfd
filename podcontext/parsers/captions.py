import json
import math
import re
from typing import Any, Dict, List, Optional, Union
from podcontext.core.errors import MalformedResponse
from podcontext.models.transcript import CaptionEvent, Segment

DEFAULT_TEXT_DURATION_MS = 3000

_P_TAG_RE = re.compile(r"<p\b([^>]*)>([\s\S]*?)</p>")
_TEXT_TAG_RE = re.compile(r"<text\b([^>]*)>([\s\S]*?)</text>")
_ATTR_RE = re.compile(r'([\w:-]+)\s*=\s*"([^"]*)"')
_TAG_RE = re.compile(r"<[^>]+>")
_SECONDS_RE = re.compile(r"[\d.]+")

# order matters: "&amp;" first
_ENTITIES = (("&amp;", "&"), ("&lt;", "<"), ("&gt;", ">"), ("&quot;", "\""), ("&#39;", "'"))


def _attrs(raw: str) -> Dict[str, str]:
    return {k: v for k, v in _ATTR_RE.findall(raw)}


def _clean_caption_text(raw: str) -> str:
    text = _TAG_RE.sub("", raw)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text.replace("\n", " ").strip()


def _seconds_to_ms(value: str) -> int:
    if not _SECONDS_RE.fullmatch(value):
        raise ValueError(f"not a seconds value: {value!r}")
    # half-up, so 0.0005 s lands on 1 ms rather than banker's rounding
    return int(math.floor(float(value) * 1000 + 0.5))


def parse_json3(content: Union[str, bytes, Dict[str, Any]]) -> List[CaptionEvent]:
    """Parse a ``fmt=json3`` caption payload.

    Raises ``ValueError`` if ``content`` is not JSON; a document without
    events simply yields nothing.
    """
    data = json.loads(content) if isinstance(content, (str, bytes)) else content
    if not isinstance(data, dict):
        return []
    events = []
    for ev in data.get("events") or []:
        if not isinstance(ev, dict):
            continue
        segs = ev.get("segs")
        if not isinstance(segs, list):
            continue
        text = "".join((s.get("utf8") or "") for s in segs if isinstance(s, dict)).strip()
        if not text:
            continue
        try:
            events.append(CaptionEvent(
                start_ms=int(ev.get("tStartMs") or 0),
                duration_ms=int(ev.get("dDurationMs") or 0),
                text=text,
            ))
        except (TypeError, ValueError, OverflowError):
            continue
    return events


def parse_xml_p(content: str) -> List[CaptionEvent]:
    """``<p t="ms" d="ms">`` elements, as served for ``fmt=srv3``."""
    events = []
    for raw_attrs, body in _P_TAG_RE.findall(content):
        attrs = _attrs(raw_attrs)
        t, d = attrs.get("t"), attrs.get("d")
        if t is None or d is None or not t.isdigit() or not d.isdigit():
            continue
        text = _clean_caption_text(body)
        if text:
            events.append(CaptionEvent(start_ms=int(t), duration_ms=int(d), text=text))
    return events


def parse_xml_text(content: str) -> List[CaptionEvent]:
    """``<text start="s" dur="s">`` elements, the legacy timedtext dialect."""
    events = []
    for raw_attrs, body in _TEXT_TAG_RE.findall(content):
        attrs = _attrs(raw_attrs)
        text = _clean_caption_text(body)
        if not text:
            continue
        try:
            dur = attrs.get("dur")
            events.append(CaptionEvent(
                start_ms=_seconds_to_ms(attrs["start"]),
                duration_ms=_seconds_to_ms(dur) if dur else DEFAULT_TEXT_DURATION_MS,
                text=text,
            ))
        except (KeyError, ValueError, OverflowError):
            continue
    return events


def parse_xml_captions(content: str) -> List[CaptionEvent]:
    events = parse_xml_p(content)
    if not events:
        events = parse_xml_text(content)
    return events


def sniff_and_parse(content: str) -> List[CaptionEvent]:
    """Route an unlabelled caption body by its first non-whitespace character."""
    head = content.lstrip()[:1]
    if head == "{":
        return parse_json3(content)
    if head == "<":
        return parse_xml_captions(content)
    return []


def events_to_segments(events: List[CaptionEvent]) -> List[Segment]:
    return [
        Segment(start_ms=ev.start_ms, end_ms=ev.start_ms + ev.duration_ms, text=ev.text)
        for ev in events
    ]


def _dig(data: Any, *path: str) -> Optional[Any]:
    for key in path:
        if not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data


_SEGMENT_LIST_PATH = (
    "updateEngagementPanelAction", "content", "transcriptRenderer", "content",
    "transcriptSearchPanelRenderer", "body", "transcriptSegmentListRenderer", "initialSegments",
)


def parse_transcript_envelope(data: Any) -> List[Segment]:
    """Segments from a ``get_transcript`` response.

    Raises ``MalformedResponse`` when there are no actions or none of them
    carries a segment list.
    """
    actions = data.get("actions") if isinstance(data, dict) else None
    if not isinstance(actions, list) or not actions:
        raise MalformedResponse("No transcript data returned from API", detail="missing or empty 'actions'")

    initial = None
    for action in actions:
        initial = _dig(action, *_SEGMENT_LIST_PATH)
        if isinstance(initial, list):
            break
    if not isinstance(initial, list):
        raise MalformedResponse("Unexpected transcript response shape", detail="no transcriptSegmentListRenderer")

    segments = []
    for item in initial:
        renderer = item.get("transcriptSegmentRenderer") if isinstance(item, dict) else None
        if not isinstance(renderer, dict):
            # section headers and other non-segment rows
            continue
        runs = _dig(renderer, "snippet", "runs") or []
        text = "".join((r.get("text") or "") for r in runs if isinstance(r, dict)).replace("\n", " ").strip()
        if not text:
            continue
        try:
            segments.append(Segment(start_ms=int(renderer["startMs"]), end_ms=int(renderer["endMs"]), text=text))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse("Transcript segment without usable timing", detail=str(e)) from e
    return segments
