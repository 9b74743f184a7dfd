import re
from typing import Literal, Optional
from pydantic import BaseModel

Platform = Literal["youtube", "spotify"]

_YOUTUBE_ID = r"[A-Za-z0-9_-]{11}"

class ContentRef(BaseModel):
    platform: Platform
    content_id: str

    @property
    def is_podcast(self) -> bool:
        return self.platform == "spotify"

    @classmethod
    def parse(cls, value: str, platform: Optional[Platform] = None) -> "ContentRef":
        """Build a reference from a URL, a ``spotify:episode:`` URI or a raw id."""
        value = value.strip().strip('`').strip('"').strip("'").strip()
        m = re.search(r"/episode/([A-Za-z0-9]+)", value) or re.match(r"spotify:episode:([A-Za-z0-9]+)$", value)
        if m:
            return cls(platform="spotify", content_id=m.group(1))
        m = re.search(rf"(?:v=|/shorts/|/embed/|youtu\.be/)({_YOUTUBE_ID})", value)
        if m:
            return cls(platform="youtube", content_id=m.group(1))
        if platform and re.fullmatch(r"[A-Za-z0-9_-]+", value):
            return cls(platform=platform, content_id=value)
        raise ValueError(f"Cannot determine platform and id from {value!r}")
