"""Per-user ceiling on the number of submissions."""

import logging
from typing import Protocol

from ...db.repository import DuplicateKeyError
from ...errors import QuotaExceededError
from ...models.user import UserRef

logger = logging.getLogger(__name__)


class QuotaStore(Protocol):
    async def increment_quota(self, user: UserRef) -> int:
        ...

    async def decrement_quota(self, user: UserRef) -> None:
        ...


class QuotaManager:
    """Enforces the submission quota with increment, check, then compensate.

    The counter is bumped first with the store's atomic fetch-and-increment,
    so two concurrent submissions of one user always see different counts.
    A submission that pushes the counter past the limit gives its unit back
    and is rejected.
    """

    def __init__(self, store: QuotaStore, limit: int = 5):
        self.store = store
        self.limit = limit

    async def _increment(self, user: UserRef) -> int:
        try:
            return await self.store.increment_quota(user)
        except DuplicateKeyError:
            # a concurrent first insert of the same user won the race
            logger.info("Retrying quota increment for %s:%s", user.type, user.id)
            return await self.store.increment_quota(user)

    async def release(self, user: UserRef) -> None:
        """Give one unit back. Failures are logged, never raised."""
        try:
            await self.store.decrement_quota(user)
        except Exception:
            logger.warning(
                "Failed to give back quota for %s:%s",
                user.type,
                user.id,
                exc_info=True,
            )

    async def check_and_update_quota(self, user: UserRef) -> int:
        """Consume one unit of the user's quota.

        Returns:
            int: the user's submission count including this one

        Raises:
            QuotaExceededError: If the user has already used up the quota
        """
        count = await self._increment(user)
        if count > self.limit:
            await self.release(user)
            raise QuotaExceededError(
                f"You have uploaded {self.limit} times, which is the upper limit"
            )
        return count
