"""
Read operations over the rooms table.

Both functions return a result object instead of raising: store failures are
logged and reported through ``error`` / ``error_kind`` so callers never see a
raw SQLAlchemy exception.
"""

from typing import List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from common.cache import get_cached_json, set_cached_json
from common.logging_config import get_logger

from . import models
from .schemas import RoomErrorKind, RoomListResult, RoomRead, RoomResult

logger = get_logger(__name__)

ROOMS_CACHE_KEY = "rooms:all"
ROOMS_CACHE_TTL_SECONDS = 60
ROOM_CACHE_TTL_SECONDS = 300

_room_list_adapter = TypeAdapter(List[RoomRead])

FETCH_ROOMS_FAILED = "Failed to fetch rooms"
FETCH_ROOM_FAILED = "Failed to fetch room"
ROOM_NOT_FOUND = "Room not found"


def room_cache_key(room_id: str) -> str:
    return f"room:{room_id}"


def _cached_rooms() -> Optional[List[RoomRead]]:
    cached = get_cached_json(ROOMS_CACHE_KEY)
    if cached is None:
        return None
    try:
        return _room_list_adapter.validate_python(cached)
    except ValidationError:
        logger.warning("cached_value_invalid", key=ROOMS_CACHE_KEY)
        return None


def _cached_room(cache_key: str) -> Optional[RoomRead]:
    cached = get_cached_json(cache_key)
    if cached is None:
        return None
    try:
        return RoomRead.model_validate(cached)
    except ValidationError:
        logger.warning("cached_value_invalid", key=cache_key)
        return None


def fetch_all_rooms(db: Session) -> RoomListResult:
    """
    List every room in the store.

    Parameters
    ----------
    db : Session
        Database session.

    Returns
    -------
    RoomListResult
        ``data`` holds the rooms ordered by name (an empty list when the
        store has none). On a store failure ``error`` is
        "Failed to fetch rooms" with kind STORE_UNAVAILABLE.

    Notes
    -----
    With REDIS_URL set, the list is served from the cache for up to
    ROOMS_CACHE_TTL_SECONDS. Rooms added or removed in the store during that
    window are not reflected until the entry expires. A cached value that
    does not validate is treated as a miss.
    """
    cached = _cached_rooms()
    if cached is not None:
        return RoomListResult(data=cached)

    try:
        rooms = db.query(models.Room).order_by(models.Room.name, models.Room.id).all()
        data = [RoomRead.model_validate(r) for r in rooms]
    except SQLAlchemyError:
        logger.exception("fetch_all_rooms_failed")
        return RoomListResult(
            error=FETCH_ROOMS_FAILED,
            error_kind=RoomErrorKind.STORE_UNAVAILABLE,
        )

    set_cached_json(
        ROOMS_CACHE_KEY,
        [r.model_dump() for r in data],
        ttl_seconds=ROOMS_CACHE_TTL_SECONDS,
    )
    logger.debug("fetch_all_rooms", count=len(data))
    return RoomListResult(data=data)


def get_room_by_id(db: Session, room_id: str) -> RoomResult:
    """
    Fetch a single room by its identifier.

    Parameters
    ----------
    db : Session
        Database session.
    room_id : str
        Identifier of the room. Empty identifiers match nothing.

    Returns
    -------
    RoomResult
        ``data`` holds the room when it exists. Otherwise ``error`` is
        "Room not found" (NOT_FOUND) when the query matched no record, or
        "Failed to fetch room" (STORE_UNAVAILABLE) when it could not run.
    """
    if not room_id or not room_id.strip():
        return RoomResult(error=ROOM_NOT_FOUND, error_kind=RoomErrorKind.NOT_FOUND)

    cache_key = room_cache_key(room_id)
    cached = _cached_room(cache_key)
    if cached is not None:
        return RoomResult(data=cached)

    try:
        room = db.get(models.Room, room_id)
        data = RoomRead.model_validate(room) if room is not None else None
    except SQLAlchemyError:
        logger.exception("get_room_by_id_failed", room_id=room_id)
        return RoomResult(
            error=FETCH_ROOM_FAILED,
            error_kind=RoomErrorKind.STORE_UNAVAILABLE,
        )

    if data is None:
        logger.info("room_not_found", room_id=room_id)
        return RoomResult(error=ROOM_NOT_FOUND, error_kind=RoomErrorKind.NOT_FOUND)

    set_cached_json(cache_key, data.model_dump(), ttl_seconds=ROOM_CACHE_TTL_SECONDS)
    return RoomResult(data=data)
