from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar
from pydantic import BaseModel, ConfigDict
from podcontext.core.errors import AcquisitionCancelled, TranscriptError
from podcontext.utils.logger import logger

T = TypeVar("T")

Attempt = Tuple[str, Callable[[], Awaitable[T]]]

class AttemptFailure(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    error: Exception

class Outcome(BaseModel, Generic[T]):
    """Result of running an ordered list of fallible attempts."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Optional[T] = None
    winner: Optional[str] = None
    failures: List[AttemptFailure] = []

    @property
    def ok(self) -> bool:
        return self.winner is not None

    @property
    def last_error(self) -> Optional[Exception]:
        return self.failures[-1].error if self.failures else None

async def first_success(
    attempts: Sequence[Attempt],
    accept: Optional[Callable[[Any], bool]] = None,
    label: str = "attempt",
) -> Outcome:
    """Run ``attempts`` in order and stop at the first one whose result is accepted.

    Every failure (raised exception or rejected result) is recorded and the next
    attempt is tried. Cancellation is never treated as a failure: it propagates.
    """
    outcome: Outcome = Outcome()
    for name, run in attempts:
        try:
            value = await run()
        except AcquisitionCancelled:
            raise
        except Exception as e:
            logger.warning(f"{label} '{name}' failed: {e}")
            outcome.failures.append(AttemptFailure(name=name, error=e))
            continue
        if accept is not None and not accept(value):
            logger.info(f"{label} '{name}' returned no usable content")
            outcome.failures.append(AttemptFailure(name=name, error=ValueError("empty result")))
            continue
        logger.debug(f"{label} '{name}' succeeded")
        outcome.value = value
        outcome.winner = name
        return outcome
    return outcome

def raise_for_outcome(outcome: Outcome, fallback: TranscriptError) -> Any:
    """Return the winning value, or raise the last classified error (``fallback`` otherwise)."""
    if outcome.ok:
        return outcome.value
    last = outcome.last_error
    if isinstance(last, TranscriptError):
        raise last
    if last is not None and fallback.detail is None:
        fallback.detail = str(last)
    raise fallback
