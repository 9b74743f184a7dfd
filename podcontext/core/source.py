from abc import ABC, abstractmethod
from typing import Optional, Union
from podcontext.core.credentials import CredentialProvider
from podcontext.core.transport import HttpClient
from podcontext.models.transcript import SpeakerTranscript, Transcript

class TranscriptSource(ABC):
    """One acquisition strategy against one upstream."""

    name: str = "source"

    def __init__(self, http: HttpClient):
        self.http = http

    @abstractmethod
    async def get_transcript(self, content_id: str, credentials: Optional[CredentialProvider] = None) -> Union[Transcript, SpeakerTranscript]:
        """Fetch and normalize a transcript, raising a classified error on failure."""
        pass
