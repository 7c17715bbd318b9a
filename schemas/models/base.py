"""
Common shape of a stored row.

A row exposes its MongoDB `_id` as `id`. The ObjectId stays an ObjectId in
Python and is rendered as a hex string in JSON; it is None until the row has
been inserted.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    WithJsonSchema,
)


def _as_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"not an ObjectId: {value!r}")


RowId = Annotated[
    ObjectId,
    PlainValidator(_as_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
    WithJsonSchema({"type": "string", "pattern": "^[0-9a-f]{24}$"}),
]


class StoredRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[RowId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Field dict for insert_one, keyed by alias; `_id` left to the server when unset."""
        data = self.model_dump(by_alias=True)
        if data.get("_id") is None:
            del data["_id"]
        return data

    @classmethod
    def from_mongo(cls, row: dict) -> StoredRow:
        return cls.model_validate(row)
