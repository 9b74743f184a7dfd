from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

class CaptionTrack(BaseModel):
    """One caption stream advertised by the watch page."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    language_code: Optional[str] = Field(default=None, alias="languageCode")
    kind: Optional[str] = None

    @property
    def kind_label(self) -> str:
        if not self.kind:
            return "manual"
        if self.kind == "asr":
            return "auto"
        return self.kind

class CaptionEvent(BaseModel):
    start_ms: int = Field(ge=0)
    duration_ms: int = Field(default=0, ge=0)
    text: str = Field(min_length=1)

class Segment(BaseModel):
    start_ms: int = Field(ge=0)
    end_ms: int = Field(ge=0)
    text: str

    @model_validator(mode="after")
    def _check_order(self):
        if self.end_ms < self.start_ms:
            raise ValueError(f"end_ms {self.end_ms} precedes start_ms {self.start_ms}")
        return self

class Transcript(BaseModel):
    content_id: str
    platform: Literal["youtube"] = "youtube"
    source: Literal["timedtext", "timedtext_direct", "internal_api"] = "timedtext"
    language: Optional[str] = None
    segments: List[Segment]

class SpeakerBlock(BaseModel):
    speaker_label: str
    sentences: List[str] = []

class SpeakerTranscript(BaseModel):
    content_id: str
    platform: Literal["spotify"] = "spotify"
    source: Literal["read_along"] = "read_along"
    blocks: List[SpeakerBlock]
