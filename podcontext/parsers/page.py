"""Extraction of caption metadata embedded in a watch page.

The player response is inlined as a JavaScript object literal. A regular
expression cannot reliably find its end because captions, titles and
descriptions contain braces inside quoted strings, so the object is delimited
with a small quote-aware scanner instead.
"""
import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ValidationError
from podcontext.config import settings
from podcontext.models.transcript import CaptionTrack
from podcontext.utils.logger import logger

PLAYER_RESPONSE_MARKER = "ytInitialPlayerResponse"

_TRACKS_BEFORE_AUDIO_RE = re.compile(r'"captionTracks":\s*(\[[\s\S]*?\])\s*,\s*"audioTracks"')
_TRACKS_BASEURL_RE = re.compile(r'"captionTracks":\s*(\[\{"baseUrl"[\s\S]*?\}\])')
_TIMEDTEXT_URL_RE = re.compile(r'https://www\.youtube\.com/api/timedtext[^"]+')


class ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"
    ESCAPED = "escaped"


def scan_balanced_object(text: str, start: int, limit: Optional[int] = None) -> Optional[Tuple[int, int]]:
    """Return the ``(start, end)`` span of the object opening at ``text[start]``.

    ``end`` is exclusive. Returns ``None`` when ``text[start]`` is not ``{``,
    when the object is unbalanced or truncated, or when it does not close
    within ``limit`` characters.
    """
    if limit is None:
        limit = settings.PAGE_SCAN_LIMIT
    if start < 0 or start >= len(text) or text[start] != "{":
        return None
    state = ScanState.NORMAL
    depth = 0
    stop = min(len(text), start + limit)
    for i in range(start, stop):
        ch = text[i]
        if state is ScanState.ESCAPED:
            state = ScanState.IN_STRING
        elif state is ScanState.IN_STRING:
            if ch == "\\":
                state = ScanState.ESCAPED
            elif ch == '"':
                state = ScanState.NORMAL
        elif ch == '"':
            state = ScanState.IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1
    return None


def extract_player_response(html: str) -> Optional[Dict[str, Any]]:
    marker = html.find(PLAYER_RESPONSE_MARKER)
    if marker == -1:
        return None
    brace = html.find("{", marker)
    if brace == -1:
        return None
    span = scan_balanced_object(html, brace)
    if span is None:
        logger.debug("Player response object is unbalanced or exceeds the scan limit")
        return None
    try:
        data = json.loads(html[span[0]:span[1]])
    except ValueError as e:
        logger.debug(f"Failed to parse player response: {e}")
        return None
    return data if isinstance(data, dict) else None


def _tracks_from_json(raw: Any) -> List[CaptionTrack]:
    if not isinstance(raw, list):
        return []
    tracks = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            tracks.append(CaptionTrack.model_validate(item))
        except ValidationError:
            continue
    return tracks


def tracks_from_player_response(html: str) -> List[CaptionTrack]:
    data = extract_player_response(html)
    if data is None:
        return []
    renderer = (data.get("captions") or {}).get("playerCaptionsTracklistRenderer") or {}
    return _tracks_from_json(renderer.get("captionTracks"))


def _tracks_from_pattern(html: str, pattern: re.Pattern) -> List[CaptionTrack]:
    m = pattern.search(html)
    if not m:
        return []
    try:
        return _tracks_from_json(json.loads(m.group(1)))
    except ValueError as e:
        logger.debug(f"Caption track array did not parse: {e}")
        return []


def find_timedtext_url(html: str) -> Optional[str]:
    m = _TIMEDTEXT_URL_RE.search(html)
    if not m:
        return None
    return unescape_url(m.group(0))


def unescape_url(url: str) -> str:
    return url.replace("\\u0026", "&")


class CaptionDiscovery(BaseModel):
    """Either a list of tracks to choose from or a ready-to-use caption URL."""
    method: str
    tracks: List[CaptionTrack] = []
    direct_url: Optional[str] = None


def discover_captions(html: str) -> Optional[CaptionDiscovery]:
    """Find caption tracks in a watch page, trying the structural scan first."""
    tracks = tracks_from_player_response(html)
    if tracks:
        return CaptionDiscovery(method="player_response", tracks=tracks)

    for method, pattern in (
        ("tracks_before_audio", _TRACKS_BEFORE_AUDIO_RE),
        ("tracks_base_url", _TRACKS_BASEURL_RE),
    ):
        tracks = _tracks_from_pattern(html, pattern)
        if tracks:
            logger.info(f"Found caption tracks via {method} pattern")
            return CaptionDiscovery(method=method, tracks=tracks)

    url = find_timedtext_url(html)
    if url:
        logger.info("Found timedtext URL embedded in page")
        return CaptionDiscovery(method="timedtext_url", direct_url=url)
    return None
