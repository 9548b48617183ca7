"""
Pydantic schemas for booking-related request/response validation.
"""

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, StrictInt, ValidationError, model_validator


class RoomSelection(BaseModel):
    """Body of POST/PUT /booking: `{"roomId": 5}` or a bare `5`."""

    room_id: Optional[StrictInt] = Field(default=None, alias="roomId")

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_room_id(cls, data: Any) -> Any:
        if isinstance(data, int) and not isinstance(data, bool):
            return {"roomId": data}
        return data

    @classmethod
    def room_id_from(cls, payload: Any) -> Optional[int]:
        """Extract the room id, or None when the payload carries no usable one."""
        if payload is None:
            return None
        try:
            return cls.model_validate(payload).room_id
        except ValidationError:
            return None


class RoomSummary(BaseModel):
    id: int
    name: str
    capacity: int
    hotel_id: int = Field(
        validation_alias=AliasChoices("hotelId", "hotel_id"),
        serialization_alias="hotelId",
    )

    model_config = {"from_attributes": True}


class BookingWithRoom(BaseModel):
    """Response of GET /booking. Serialized as `{"id": .., "Room": {..}}`."""

    id: int
    room: RoomSummary = Field(
        validation_alias=AliasChoices("Room", "room"),
        serialization_alias="Room",
    )


class BookingIdResponse(BaseModel):
    id: int
