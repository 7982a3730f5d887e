from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class RoomBase(BaseModel):
    """
    Base schema for room information.

    Shared display fields of a room.
    """
    name: str = Field(...)
    short_description: str = Field(default="")
    long_description: str = Field(default="")
    price: float = Field(..., ge=0)
    capacity: int = Field(..., ge=1)
    type: str = Field(...)


class RoomRead(RoomBase):
    """
    Schema returned when reading room data.

    Extends RoomBase with the room identifier.
    """
    id: str

    model_config = ConfigDict(from_attributes=True)


class RoomErrorKind(str, Enum):
    """Why a room lookup produced no data."""

    NOT_FOUND = "not_found"
    STORE_UNAVAILABLE = "store_unavailable"


class RoomListResult(BaseModel):
    """
    Outcome of listing rooms: either ``data`` or ``error`` is set.
    """
    data: Optional[List[RoomRead]] = None
    error: Optional[str] = None
    error_kind: Optional[RoomErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RoomResult(BaseModel):
    """
    Outcome of fetching one room: either ``data`` or ``error`` is set.
    """
    data: Optional[RoomRead] = None
    error: Optional[str] = None
    error_kind: Optional[RoomErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None
