"""Referral tokens crediting the user who recommended a submitter."""

import re
from typing import Any, Dict, Optional, Protocol

from ...errors import MalformedTokenError
from ...models.user import UserRef

TOKEN_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class RecommendationStore(Protocol):
    async def get_or_create_recommendation(self, user: UserRef) -> str:
        ...

    async def find_recommendation(self, recommendation_id: str) -> Optional[Dict[str, Any]]:
        ...

    async def increment_recommendation_count(self, user: UserRef) -> None:
        ...


class RecommendationService:
    def __init__(self, store: RecommendationStore):
        self.store = store

    async def get_recommendation_string(self, user: UserRef) -> str:
        """Token to hand out for ``user``; the same user always gets the same token."""
        return await self.store.get_or_create_recommendation(user)

    async def get_user_by_recommendation_string(
        self, recommendation_string: Any
    ) -> Optional[UserRef]:
        """Look up the user a token belongs to.

        Returns:
            The recommending user, or None for a well-formed but unknown token

        Raises:
            MalformedTokenError: If the value cannot be a token at all
        """
        if not isinstance(recommendation_string, str):
            raise MalformedTokenError("recommendation_string should be a string")
        if not TOKEN_RE.match(recommendation_string):
            raise MalformedTokenError(
                f"{recommendation_string!r} is not a recommendation token"
            )

        result = await self.store.find_recommendation(recommendation_string.lower())
        if result is None:
            return None
        return UserRef(id=result["user_id"], type=result["user_type"])

    async def credit(self, user: UserRef) -> None:
        await self.store.increment_recommendation_count(user)
