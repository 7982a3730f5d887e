# rooms_web/views.py
"""
List and detail views.

Each view reads its state from the shared ``QueryClient`` and moves through
LOADING -> SUCCESS | FAILURE. ``retry`` puts it back into LOADING.
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from html import escape
from typing import Hashable, Optional
from urllib.parse import quote

from rooms_service.actions import FETCH_ROOM_FAILED, FETCH_ROOMS_FAILED

from .query_client import QueryClient, QueryFn, QueryState, QueryStatus
from .sources import RoomsSource


def room_url(room_id: str) -> str:
    return f"/room/{quote(room_id, safe='')}"


class RoomsView(ABC):
    query_key: Hashable = ()
    error_message: Optional[str] = None
    retry_url = "/retry"

    def __init__(self, query_client: QueryClient, source: RoomsSource):
        self.query_client = query_client
        self.source = source

    @abstractmethod
    def query_fn(self) -> QueryFn:
        """Coroutine function that fetches the view's data."""

    @property
    def state(self) -> QueryState:
        return self.query_client.get_state(self.query_key) or QueryState()

    @property
    def status(self) -> QueryStatus:
        return self.state.status

    def mount(self) -> "asyncio.Task[None]":
        """Issue the view's query, sharing a fetch already in flight."""
        return self.query_client.fetch(self.query_key, self.query_fn(), self.error_message)

    def retry(self) -> "asyncio.Task[None]":
        """Re-issue the view's query. No backoff, no limit."""
        if self.query_client.get_state(self.query_key) is None:
            return self.mount()
        return self.query_client.refetch(self.query_key)

    async def wait(self, timeout: Optional[float] = None) -> QueryState:
        return await self.query_client.wait(self.query_key, timeout)

    def render(self) -> str:
        state = self.state
        if state.status is QueryStatus.SUCCESS:
            return self.render_success(state.data)
        if state.status is QueryStatus.FAILURE:
            return self.render_failure(state.error or "")
        return '<div class="loading">Loading...</div>'

    def render_failure(self, message: str) -> str:
        return (
            '<div class="failure">'
            f'<p class="error">{escape(message)}</p>'
            f'<form method="post" action="{escape(self.retry_url)}">'
            '<button type="submit">Retry</button>'
            "</form>"
            "</div>"
        )

    @abstractmethod
    def render_success(self, data) -> str:
        """HTML for the settled data."""


class RoomListView(RoomsView):
    query_key = ("rooms",)
    error_message = FETCH_ROOMS_FAILED

    def query_fn(self) -> QueryFn:
        return self.source.fetch_all_rooms

    def render_success(self, rooms) -> str:
        items = "".join(
            f'<li class="room"><a href="{escape(room_url(room.id))}">{escape(room.name)}</a></li>'
            for room in rooms
        )
        return f"<h2>Rooms List:</h2><ul>{items}</ul>"


class RoomDetailView(RoomsView):
    error_message = FETCH_ROOM_FAILED

    def __init__(self, query_client: QueryClient, source: RoomsSource, room_id: str):
        super().__init__(query_client, source)
        self.room_id = room_id
        self.query_key = ("room", room_id)
        self.retry_url = f"{room_url(room_id)}/retry"

    def query_fn(self) -> QueryFn:
        return partial(self.source.get_room_by_id, self.room_id)

    def render_success(self, room) -> str:
        return (
            f"<h1>{escape(room.name)}</h1>"
            '<div class="room-detail">'
            f'<p class="short">{escape(room.short_description)}</p>'
            f'<p class="long">{escape(room.long_description)}</p>'
            f'<p class="price">Price: ${room.price:.2f}</p>'
            f"<p>Capacity: {room.capacity} persons</p>"
            f"<p>Room Type: {escape(room.type)}</p>"
            "</div>"
        )
