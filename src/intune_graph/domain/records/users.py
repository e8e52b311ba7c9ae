"""Directory user records (``/users``)."""

from __future__ import annotations

from .base import GraphRecord


class UserRecord(GraphRecord):
    id: str
    display_name: str | None = None
    given_name: str | None = None
    surname: str | None = None
    mail: str | None = None
    user_principal_name: str | None = None
    job_title: str | None = None
    account_enabled: bool | None = None
