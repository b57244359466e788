from typing import Awaitable, Callable, TypeVar
from eventhub.core.config import settings
from eventhub.core.exceptions import RevisionConflictError
from eventhub.core.logging import logger

T = TypeVar("T")


async def with_revision_retries(
    operation: Callable[..., Awaitable[T]], *args, label: str = "operation"
) -> T:
    """
    Run ``operation`` until it commits without losing a revision race.

    ``operation`` must re-read everything it checks on every call; it signals a
    lost race by raising RevisionConflictError. Any other exception (including
    domain errors such as NotFoundError) propagates on the first attempt.
    """
    attempts = max(1, settings.REVISION_RETRY_LIMIT)
    for attempt in range(1, attempts + 1):
        try:
            return await operation(*args)
        except RevisionConflictError:
            logger.warning(f"Revision conflict during {label} (attempt {attempt}/{attempts})")
    logger.error(f"Giving up on {label} after {attempts} revision conflicts")
    raise RevisionConflictError()
