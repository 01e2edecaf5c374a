"""Projection of an untyped request payload onto the submission whitelist."""

from typing import Any, Mapping

from ...models.submission import SubmissionFields
from ...models.user import AuthUser
from ...models.working import Author


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def collect_fields(payload: Mapping[str, Any]) -> SubmissionFields:
    """Copy whitelisted fields out of ``payload``.

    A string field is kept only when it is a non-empty string. Unknown keys
    are dropped. ``extra_info`` is copied whenever it is truthy so that a
    wrong shape can be reported by validation.
    """
    values = {
        name: payload[name]
        for name in SubmissionFields.string_field_names()
        if _non_empty_string(payload.get(name))
    }
    if payload.get("extra_info"):
        values["extra_info"] = payload["extra_info"]
    return SubmissionFields(**values)


def author_from_user(user: AuthUser, email: str = None) -> Author:
    """Build the record author from the authenticated caller, never from the payload."""
    return Author(id=user.id, name=user.name, type=user.type, email=email)
