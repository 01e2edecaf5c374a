"""Identity models handed over by the authentication layer."""

from typing import Optional

from pydantic import BaseModel


class UserRef(BaseModel):
    """Provider-scoped reference to a user, e.g. a facebook account."""

    id: str
    type: str


class AuthUser(BaseModel):
    """The authenticated caller of a request."""

    id: str
    type: str = "facebook"
    name: Optional[str] = None

    @property
    def ref(self) -> UserRef:
        return UserRef(id=self.id, type=self.type)
