import json
from typing import Optional
from podcontext.config import settings
from podcontext.core.credentials import CredentialProvider
from podcontext.core.errors import CredentialsNotReady, MalformedResponse, classify_status
from podcontext.core.source import TranscriptSource
from podcontext.models.credentials import SpotifyCredentials
from podcontext.models.transcript import SpeakerTranscript
from podcontext.parsers.speakers import group_sections
from podcontext.utils.logger import logger

class SpotifyReadAlongSource(TranscriptSource):
    """Episode transcripts from the read-along endpoint of the Spotify client API."""

    name = "read_along"

    def _url(self, episode_id: str) -> str:
        return (
            f"{settings.SPOTIFY_CLIENT_BASE_URL}/transcript-read-along/v2/episode/{episode_id}"
            "?format=json&maxSentenceLength=500&excludeCC=true"
        )

    async def get_transcript(self, content_id: str, credentials: Optional[CredentialProvider] = None) -> SpeakerTranscript:
        if credentials is None:
            raise CredentialsNotReady("Auth tokens not captured yet")
        creds = credentials.require()
        if not isinstance(creds, SpotifyCredentials):
            raise CredentialsNotReady("Credentials are not Spotify credentials")

        headers = {
            "authorization": creds.authorization,
            "client-token": creds.client_token,
            "accept": "application/json",
            "accept-language": "en-GB",
        }
        logger.info(f"Fetching Spotify transcript for episode {content_id}...")
        resp = await self.http.get(self._url(content_id), headers=headers)
        if not resp.ok:
            raise classify_status(
                resp.status,
                not_found_message="No transcript available for this episode",
                auth_message="Authentication failed. Please refresh the page and try again.",
            )
        try:
            data = resp.parse_json()
        except json.JSONDecodeError as e:
            raise MalformedResponse("Spotify returned invalid JSON", detail=str(e)) from e
        if not isinstance(data, dict):
            raise MalformedResponse("Unexpected Spotify transcript shape", detail=type(data).__name__)
        sections = data.get("section") or []
        if not isinstance(sections, list):
            raise MalformedResponse("Unexpected Spotify transcript shape", detail="'section' is not a list")

        blocks = group_sections(sections)
        logger.info(f"Grouped {len(sections)} sections into {len(blocks)} speaker blocks")
        return SpeakerTranscript(content_id=content_id, blocks=blocks)
