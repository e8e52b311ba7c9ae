"""Helpers shared by the entity converters."""

from __future__ import annotations

from datetime import UTC, datetime


def parse_time_property(value: datetime | str | None) -> int | None:
    """Normalize a Graph timestamp to epoch milliseconds (UTC).

    Naive datetimes are read as UTC. Unparseable strings yield ``None`` so a
    malformed optional timestamp never aborts a conversion.
    """

    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip()
        if not normalized:
            return None
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(value.timestamp() * 1000)


def lowercase_or_none(value: str | None) -> str | None:
    return value.lower() if value is not None else None
