"""Shared base for Microsoft Graph source records."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GraphRecord(BaseModel):
    """Frozen view of one Graph payload.

    Unknown keys are kept so that ``raw()`` returns the record as it was
    received; downstream steps re-derive entities from it.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )

    def raw(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
