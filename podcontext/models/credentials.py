from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, ConfigDict, Field
from podcontext.config import settings

class ClientConfig(BaseModel):
    """Innertube client parameters as exposed by the page's ``ytcfg``.

    Accepts either the upstream key names (``INNERTUBE_CONTEXT`` ...) or the
    snake_case field names. Only client-identification fields get defaults;
    nothing that authenticates a user is ever filled in here.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_key: Optional[str] = Field(default=None, alias="INNERTUBE_API_KEY")
    innertube_context: Optional[Dict[str, Any]] = Field(default=None, alias="INNERTUBE_CONTEXT")
    client_name: Optional[Union[int, str]] = Field(default=None, alias="INNERTUBE_CONTEXT_CLIENT_NAME")
    client_version: Optional[str] = Field(default=None, alias="INNERTUBE_CONTEXT_CLIENT_VERSION")
    visitor_data: Optional[str] = Field(default=None, alias="VISITOR_DATA")

    def resolved_client_name(self) -> str:
        return str(self.client_name or 1)

    def resolved_client_version(self) -> str:
        return self.client_version or settings.INNERTUBE_CLIENT_VERSION

    def request_context(self) -> Dict[str, Any]:
        context = dict(self.innertube_context or {})
        if not context.get("client"):
            context["client"] = {
                "hl": "en",
                "gl": "US",
                "clientName": "WEB",
                "clientVersion": self.resolved_client_version(),
                "platform": "DESKTOP",
            }
        return context

class SpotifyCredentials(BaseModel):
    authorization: Optional[str] = None
    client_token: Optional[str] = None

    def is_complete(self) -> bool:
        return bool(self.authorization and self.client_token)

class YouTubeCredentials(BaseModel):
    client_config: ClientConfig = Field(default_factory=ClientConfig)
    continuation_params: Optional[str] = None
    cookies: Dict[str, str] = {}

    def is_complete(self) -> bool:
        return bool(self.continuation_params)

Credentials = Union[SpotifyCredentials, YouTubeCredentials]
