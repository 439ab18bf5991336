"""
schemas/operations.py
---------------------
Pydantic models for the itinerary mutations the engine hands back to callers.

The engine never executes an operation. The conversational layer validates
proposed operations against these models before applying them, so contract
violations surface here as ``pydantic.ValidationError`` rather than inside
the planners.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from tripcore import config

NumericId = Annotated[str, Field(pattern=r"^\d+$")]
IsoDate   = Annotated[str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$")]
TimeStr   = Annotated[str, Field(pattern=r"^\d{2}:\d{2}(:\d{2})?$")]
Notes     = Annotated[str, Field(max_length=2000)]


class _OperationBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    def _check_time_pair(self) -> None:
        fields = self.model_fields_set
        touches = "start_time" in fields or "end_time" in fields
        if not touches:
            return
        if "start_time" not in fields or "end_time" not in fields:
            raise ValueError(
                "When changing time, provide both startTime and endTime (or set both to null)."
            )
        both_null = self.start_time is None and self.end_time is None
        both_set = self.start_time is not None and self.end_time is not None
        if not (both_null or both_set):
            raise ValueError("startTime and endTime must both be strings, or both be null.")


class UpdateActivityOperation(_OperationBase):
    op: Literal["update_activity"] = "update_activity"
    itinerary_activity_id: NumericId = Field(alias="itineraryActivityId")
    date: Optional[IsoDate] = None
    start_time: Optional[TimeStr] = Field(default=None, alias="startTime")
    end_time: Optional[TimeStr] = Field(default=None, alias="endTime")
    notes: Optional[Notes] = None

    @model_validator(mode="after")
    def _validate(self) -> "UpdateActivityOperation":
        if not ({"date", "start_time", "end_time", "notes"} & self.model_fields_set):
            raise ValueError("update_activity must include at least one field")
        self._check_time_pair()
        return self


class RemoveActivityOperation(_OperationBase):
    op: Literal["remove_activity"] = "remove_activity"
    itinerary_activity_id: NumericId = Field(alias="itineraryActivityId")


class AddPlaceOperation(_OperationBase):
    op: Literal["add_place"] = "add_place"
    query: Optional[Annotated[str, Field(min_length=1, max_length=200)]] = None
    place_id: Optional[Annotated[str, Field(min_length=1, max_length=256)]] = Field(
        default=None, alias="placeId"
    )
    name: Optional[Annotated[str, Field(max_length=120)]] = None
    date: Optional[IsoDate] = None
    start_time: Optional[TimeStr] = Field(default=None, alias="startTime")
    end_time: Optional[TimeStr] = Field(default=None, alias="endTime")
    notes: Optional[Notes] = None

    @model_validator(mode="before")
    @classmethod
    def _strip_text(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {
                k: (v.strip() if k in ("query", "placeId", "place_id", "name") and isinstance(v, str) else v)
                for k, v in data.items()
            }
        return data

    @model_validator(mode="after")
    def _validate(self) -> "AddPlaceOperation":
        if not self.query and not self.place_id:
            raise ValueError("add_place requires a query or a placeId")
        self._check_time_pair()
        return self


Operation = Annotated[
    Union[UpdateActivityOperation, RemoveActivityOperation, AddPlaceOperation],
    Field(discriminator="op"),
]

_operation_list = TypeAdapter(
    Annotated[list[Operation], Field(max_length=config.MAX_OPERATIONS)]
)


def parse_operations(payload: Any) -> list[Operation]:
    """Validate a list of raw operation dicts; raises pydantic.ValidationError."""
    return _operation_list.validate_python(payload)


def dump_operations(operations: list[Operation]) -> list[dict[str, Any]]:
    """Wire (camelCase) representation, omitting fields that were never set."""
    return [{"op": op.op, **op.model_dump(by_alias=True, exclude_unset=True)} for op in operations]
