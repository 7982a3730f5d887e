# rooms_web/sources.py
"""Where the rooms pages get their data from."""

import asyncio
from typing import Callable, Optional, Protocol
from urllib.parse import quote

import httpx
from sqlalchemy.orm import Session

from common.logging_config import get_logger
from rooms_service import actions
from rooms_service.database import SessionLocal
from rooms_service.schemas import RoomErrorKind, RoomListResult, RoomRead, RoomResult

logger = get_logger(__name__)


class RoomsSource(Protocol):
    async def fetch_all_rooms(self) -> RoomListResult:
        ...

    async def get_room_by_id(self, room_id: str) -> RoomResult:
        ...

    async def aclose(self) -> None:
        ...


class LocalRoomsSource:
    """
    Call the data access functions in-process.

    Each call opens its own session and runs in a worker thread so the
    event loop keeps serving other requests.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    async def fetch_all_rooms(self) -> RoomListResult:
        return await asyncio.to_thread(self._call, actions.fetch_all_rooms)

    async def get_room_by_id(self, room_id: str) -> RoomResult:
        return await asyncio.to_thread(self._call, actions.get_room_by_id, room_id)

    async def aclose(self) -> None:
        return None

    def _call(self, fn, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        finally:
            db.close()


class RoomsApiClient:
    """
    Call the Rooms service over HTTP.

    Non-2xx responses become error results: 404 is NOT_FOUND, anything else
    STORE_UNAVAILABLE. Transport errors (``httpx.RequestError``) propagate to
    the caller.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def fetch_all_rooms(self) -> RoomListResult:
        resp = await self._client.get("/api/v1/rooms")
        if resp.status_code == 200:
            return RoomListResult(data=[RoomRead.model_validate(r) for r in resp.json()])

        logger.warning("rooms_api_error", path="/api/v1/rooms", status_code=resp.status_code)
        return RoomListResult(
            error=_detail(resp, actions.FETCH_ROOMS_FAILED),
            error_kind=RoomErrorKind.STORE_UNAVAILABLE,
        )

    async def get_room_by_id(self, room_id: str) -> RoomResult:
        if not room_id or not room_id.strip():
            return RoomResult(error=actions.ROOM_NOT_FOUND, error_kind=RoomErrorKind.NOT_FOUND)

        path = f"/api/v1/rooms/{quote(room_id, safe='')}"
        resp = await self._client.get(path)
        if resp.status_code == 200:
            return RoomResult(data=RoomRead.model_validate(resp.json()))
        if resp.status_code == 404:
            return RoomResult(
                error=_detail(resp, actions.ROOM_NOT_FOUND),
                error_kind=RoomErrorKind.NOT_FOUND,
            )

        logger.warning("rooms_api_error", path=path, status_code=resp.status_code)
        return RoomResult(
            error=_detail(resp, actions.FETCH_ROOM_FAILED),
            error_kind=RoomErrorKind.STORE_UNAVAILABLE,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


def _detail(resp: httpx.Response, default: str) -> str:
    try:
        detail = resp.json().get("detail")
    except (ValueError, AttributeError):
        return default
    return detail if isinstance(detail, str) and detail else default
