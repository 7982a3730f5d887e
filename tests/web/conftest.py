import pytest

from rooms_service.schemas import RoomErrorKind, RoomListResult, RoomRead, RoomResult

OCEAN_VIEW = RoomRead(
    id="1",
    name="Ocean View",
    short_description="Sea-facing double",
    long_description="Balcony overlooking the bay.",
    price=180.0,
    capacity=2,
    type="double",
)

GARDEN_SUITE = RoomRead(
    id="2",
    name="Garden Suite",
    short_description="Suite on the ground floor",
    long_description="Opens onto the garden.",
    price=310.5,
    capacity=4,
    type="suite",
)


class FakeSource:
    """
    In-memory rooms source.

    ``list_results`` are handed out in order, the last one repeating.
    ``rooms`` backs get_room_by_id unless ``room_error`` is set.
    """

    def __init__(self):
        self.list_results = [RoomListResult(data=[GARDEN_SUITE, OCEAN_VIEW])]
        self.rooms = {OCEAN_VIEW.id: OCEAN_VIEW, GARDEN_SUITE.id: GARDEN_SUITE}
        self.room_error = None
        self.list_calls = 0
        self.room_calls = []
        self.gate = None
        self.closed = False

    async def fetch_all_rooms(self):
        self.list_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        index = min(self.list_calls, len(self.list_results)) - 1
        result = self.list_results[index]
        if isinstance(result, Exception):
            raise result
        return result

    async def get_room_by_id(self, room_id):
        self.room_calls.append(room_id)
        if self.room_error is not None:
            return RoomResult(error=self.room_error, error_kind=RoomErrorKind.STORE_UNAVAILABLE)
        room = self.rooms.get(room_id)
        if room is None:
            return RoomResult(error="Room not found", error_kind=RoomErrorKind.NOT_FOUND)
        return RoomResult(data=room)

    async def aclose(self):
        self.closed = True


def store_down():
    return RoomListResult(error="Failed to fetch rooms", error_kind=RoomErrorKind.STORE_UNAVAILABLE)


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def store_down_result():
    return store_down()
