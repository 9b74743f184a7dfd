import json
from typing import Dict, List, Optional
from podcontext.config import settings
from podcontext.core.credentials import CredentialProvider
from podcontext.core.errors import (
    CredentialsNotReady, HttpError, MalformedResponse, NoCaptionsAvailable,
    NoTranscriptAvailable, classify_status,
)
from podcontext.core.fallback import first_success
from podcontext.core.source import TranscriptSource
from podcontext.models.credentials import YouTubeCredentials
from podcontext.models.transcript import CaptionEvent, CaptionTrack, Transcript
from podcontext.parsers.captions import (
    events_to_segments, parse_json3, parse_transcript_envelope, parse_xml_captions, sniff_and_parse,
)
from podcontext.parsers.page import discover_captions, unescape_url
from podcontext.utils.logger import logger


def with_query(url: str, param: str) -> str:
    return url + ("&" if "?" in url else "?") + param


def select_track(tracks: List[CaptionTrack]) -> CaptionTrack:
    """Pick the best English track, preferring manual captions over auto-generated ones."""
    usable = [t for t in tracks if t.base_url]
    if not usable:
        raise NoCaptionsAvailable("Caption track URL not found")
    for matches in (
        lambda t: t.language_code == "en" and t.kind_label == "manual",
        lambda t: t.language_code == "en",
        lambda t: (t.language_code or "").startswith("en"),
    ):
        for track in usable:
            if matches(track):
                return track
    return usable[0]


class YouTubeCaptionSource(TranscriptSource):
    """Unauthenticated strategy: scrape the watch page for caption tracks."""

    name = "timedtext"

    def _watch_url(self, video_id: str) -> str:
        return f"{settings.YOUTUBE_BASE_URL}/watch?v={video_id}"

    def _caption_headers(self, video_id: str) -> Dict[str, str]:
        return {
            "Accept": "*/*",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": self._watch_url(video_id),
            "Origin": settings.YOUTUBE_BASE_URL,
        }

    async def get_transcript(self, content_id: str, credentials: Optional[CredentialProvider] = None) -> Transcript:
        logger.info(f"Fetching watch page for {content_id}...")
        resp = await self.http.get(self._watch_url(content_id))
        if not resp.ok:
            raise HttpError(resp.status, f"Failed to fetch video page: {resp.status}")
        logger.debug(f"Got page HTML, length: {len(resp.body)}")

        discovery = discover_captions(resp.body)
        if discovery is None:
            raise NoCaptionsAvailable(
                "No captions found for this video",
                detail="the video may not have transcripts available",
            )

        if discovery.direct_url:
            events = await self._fetch_direct(content_id, discovery.direct_url)
            return Transcript(
                content_id=content_id,
                source="timedtext_direct",
                segments=events_to_segments(events),
            )

        logger.info(f"Found {len(discovery.tracks)} caption tracks via {discovery.method}")
        track = select_track(discovery.tracks)
        logger.info(f"Selected track: {track.language_code} ({track.kind_label})")
        events = await self.negotiate(content_id, unescape_url(track.base_url))
        return Transcript(
            content_id=content_id,
            source="timedtext",
            language=track.language_code,
            segments=events_to_segments(events),
        )

    async def _fetch_direct(self, content_id: str, url: str) -> List[CaptionEvent]:
        resp = await self.http.get(with_query(url, "fmt=json3"), headers=self._caption_headers(content_id))
        if not resp.ok:
            raise NoCaptionsAvailable("Embedded timedtext URL failed", detail=f"status {resp.status}")
        try:
            events = parse_json3(resp.body)
        except ValueError as e:
            raise NoCaptionsAvailable("Embedded timedtext URL returned unreadable captions", detail=str(e)) from e
        if not events:
            raise NoCaptionsAvailable("Embedded timedtext URL returned no captions")
        return events

    async def negotiate(self, content_id: str, caption_url: str) -> List[CaptionEvent]:
        """Try json3, then srv3, then the bare URL until one yields caption events."""
        headers = self._caption_headers(content_id)

        async def fetch(url: str) -> str:
            resp = await self.http.get(url, headers=headers)
            if not resp.ok:
                raise HttpError(resp.status)
            if not resp.body:
                raise ValueError("empty response body")
            return resp.body

        async def json3():
            return parse_json3(await fetch(with_query(caption_url, "fmt=json3")))

        async def srv3():
            return parse_xml_captions(await fetch(with_query(caption_url, "fmt=srv3")))

        async def bare():
            return sniff_and_parse(await fetch(caption_url))

        outcome = await first_success(
            [("json3", json3), ("srv3", srv3), ("bare", bare)],
            accept=bool,
            label="Caption format",
        )
        if not outcome.ok:
            raise NoCaptionsAvailable(
                "Failed to fetch captions in any format",
                detail="; ".join(f"{f.name}: {f.error}" for f in outcome.failures),
            )
        logger.info(f"Got {len(outcome.value)} caption events via {outcome.winner}")
        return outcome.value


class YouTubeTranscriptApiSource(TranscriptSource):
    """Authenticated strategy: the player's internal ``get_transcript`` endpoint."""

    name = "internal_api"

    async def get_transcript(self, content_id: str, credentials: Optional[CredentialProvider] = None) -> Transcript:
        if credentials is None:
            raise CredentialsNotReady("No YouTube client configuration supplied")
        creds = credentials.require()
        if not isinstance(creds, YouTubeCredentials):
            raise CredentialsNotReady("Credentials are not YouTube credentials")

        cfg = creds.client_config
        url = f"{settings.YOUTUBE_BASE_URL}/youtubei/v1/get_transcript?prettyPrint=false"
        body = {
            "context": cfg.request_context(),
            "params": creds.continuation_params,
            "languageCode": "en",
            "externalVideoId": content_id,
        }
        headers = {
            "accept": "*/*",
            "accept-language": "en-GB,en-US;q=0.9,en;q=0.8",
            "content-type": "application/json",
            "x-origin": settings.YOUTUBE_BASE_URL,
            "x-youtube-client-name": cfg.resolved_client_name(),
            "x-youtube-client-version": cfg.resolved_client_version(),
        }
        if cfg.visitor_data:
            headers["x-goog-visitor-id"] = cfg.visitor_data

        logger.info("Trying internal transcript API...")
        resp = await self.http.post_json(url, body, headers=headers, cookies=creds.cookies)
        if not resp.ok:
            raise classify_status(
                resp.status,
                auth=(401, 403),
                not_found_message="No transcript available for this video",
                auth_message="Authentication failed",
                detail="this video may not have public captions available" if resp.status in (401, 403) else None,
            )
        try:
            data = resp.parse_json()
        except json.JSONDecodeError as e:
            raise MalformedResponse("Transcript API returned invalid JSON", detail=str(e)) from e

        segments = parse_transcript_envelope(data)
        if not segments:
            raise NoTranscriptAvailable("Transcript API returned no segments")
        return Transcript(content_id=content_id, source="internal_api", language="en", segments=segments)
