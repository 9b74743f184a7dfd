from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict
from podcontext.core.credentials import CredentialProvider, as_provider
from podcontext.core.errors import AcquisitionCancelled, MalformedResponse, TranscriptError
from podcontext.core.fallback import first_success, raise_for_outcome
from podcontext.core.source import TranscriptSource
from podcontext.core.transport import CancellationToken, HttpClient, HttpxTransport, Transport
from podcontext.models.content import ContentRef
from podcontext.models.credentials import Credentials
from podcontext.models.transcript import SpeakerTranscript, Transcript
from podcontext.providers.spotify import SpotifyReadAlongSource
from podcontext.providers.youtube import YouTubeCaptionSource, YouTubeTranscriptApiSource
from podcontext.utils.logger import logger

AnyTranscript = Union[Transcript, SpeakerTranscript]
CredentialsArg = Union[Credentials, CredentialProvider, None]

class AcquisitionResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    transcript: Optional[AnyTranscript] = None
    error: Optional[TranscriptError] = None
    attempted: List[str] = []

    @property
    def ok(self) -> bool:
        return self.transcript is not None

class TranscriptService:
    """Runs the acquisition strategies for a piece of content, first success wins.

    Videos try the unauthenticated caption scrape, then the internal transcript
    API; a failure of the first is logged and never surfaced. Podcasts have a
    single strategy. Nothing is cached between calls.
    """

    def __init__(self, transport: Optional[Transport] = None):
        self.transport = transport or HttpxTransport()

    def _strategies(self, ref: ContentRef, http: HttpClient) -> List[TranscriptSource]:
        if ref.is_podcast:
            return [SpotifyReadAlongSource(http)]
        return [YouTubeCaptionSource(http), YouTubeTranscriptApiSource(http)]

    async def acquire(self, ref: ContentRef, credentials: CredentialsArg = None,
                      cancel_token: Optional[CancellationToken] = None,
                      attempted: Optional[List[str]] = None) -> AnyTranscript:
        provider = as_provider(credentials)
        if ref.is_podcast:
            # fail before any network I/O; callers retry once the provider reports ready
            provider.require()
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        http = HttpClient(self.transport, cancel_token)
        strategies = self._strategies(ref, http)

        def attempt(source: TranscriptSource):
            async def run():
                if attempted is not None:
                    attempted.append(source.name)
                return await source.get_transcript(ref.content_id, provider)
            return source.name, run

        outcome = await first_success([attempt(s) for s in strategies], label="Strategy")
        if outcome.ok:
            logger.info(f"Transcript for {ref.platform}:{ref.content_id} acquired via {outcome.winner}")
        return raise_for_outcome(outcome, MalformedResponse("Unexpected failure while acquiring transcript"))

    async def acquire_transcript(self, ref: ContentRef, credentials: CredentialsArg = None,
                                 cancel_token: Optional[CancellationToken] = None) -> AcquisitionResult:
        """Like :meth:`acquire` but returns the classified error instead of raising it."""
        attempted: List[str] = []
        try:
            transcript = await self.acquire(ref, credentials, cancel_token, attempted)
        except AcquisitionCancelled as e:
            logger.info(f"Acquisition of {ref.content_id} cancelled")
            return AcquisitionResult(error=e, attempted=attempted)
        except TranscriptError as e:
            logger.warning(f"Transcript acquisition failed for {ref.content_id}: {e}")
            return AcquisitionResult(error=e, attempted=attempted)
        return AcquisitionResult(transcript=transcript, attempted=attempted)

    async def aclose(self) -> None:
        if isinstance(self.transport, HttpxTransport):
            await self.transport.aclose()
