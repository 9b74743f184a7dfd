import asyncio
from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from podcontext.core.errors import CredentialsNotReady
from podcontext.models.credentials import Credentials
from podcontext.utils.logger import logger

class CredentialProvider(ABC):
    """Source of per-call credentials, owned by whatever captures them."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether complete credentials are available right now."""
        pass

    @abstractmethod
    def current(self) -> Optional[Credentials]:
        """A snapshot of the current credentials, or ``None``."""
        pass

    def require(self) -> Credentials:
        creds = self.current()
        if creds is None or not self.is_ready():
            raise CredentialsNotReady(
                "Auth tokens not captured yet",
                detail="interact with the page and retry once credentials are reported ready",
            )
        return creds

class StaticCredentials(CredentialProvider):
    def __init__(self, credentials: Optional[Credentials]):
        self._credentials = credentials

    def is_ready(self) -> bool:
        return self._credentials is not None and self._credentials.is_complete()

    def current(self) -> Optional[Credentials]:
        return self._credentials.model_copy(deep=True) if self._credentials is not None else None

class CredentialStore(CredentialProvider):
    """Mutable credential holder updated by an external collaborator.

    Starts empty. The collaborator calls :meth:`update`; readers get copies
    and are notified through :meth:`subscribe` or :meth:`wait_until_ready`.
    """

    def __init__(self):
        self._credentials: Optional[Credentials] = None
        self._listeners: List[Callable[[], None]] = []
        self._ready = asyncio.Event()

    def is_ready(self) -> bool:
        return self._credentials is not None and self._credentials.is_complete()

    def current(self) -> Optional[Credentials]:
        return self._credentials.model_copy(deep=True) if self._credentials is not None else None

    def update(self, credentials: Credentials) -> None:
        self._credentials = credentials.model_copy(deep=True)
        if self.is_ready():
            self._ready.set()
            for listener in list(self._listeners):
                try:
                    listener()
                except Exception as e:
                    logger.error(f"Credential listener failed: {e}")
        else:
            self._ready.clear()

    def clear(self) -> None:
        self._credentials = None
        self._ready.clear()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register ``listener`` for readiness; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    async def wait_until_ready(self) -> None:
        await self._ready.wait()

def as_provider(credentials) -> CredentialProvider:
    if isinstance(credentials, CredentialProvider):
        return credentials
    return StaticCredentials(credentials)
