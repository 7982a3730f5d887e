import os
from contextlib import asynccontextmanager
from html import escape
from typing import Callable

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from common.logging_config import configure_logging, get_logger

from .query_client import QueryClient, QueryStatus
from .sources import LocalRoomsSource, RoomsApiClient, RoomsSource
from .views import RoomDetailView, RoomListView, RoomsView, room_url

SERVICE_NAME = "rooms_web"

ROOMS_SERVICE_URL = os.getenv("ROOMS_SERVICE_URL")
RENDER_TIMEOUT = float(os.getenv("ROOMS_WEB_RENDER_TIMEOUT", "2.0"))
QUERY_CACHE_SIZE = int(os.getenv("ROOMS_WEB_QUERY_CACHE_SIZE", "100"))

configure_logging(service_name=SERVICE_NAME)
logger = get_logger(__name__)

router = APIRouter()


def build_source() -> RoomsSource:
    """
    Use the Rooms service over HTTP when ROOMS_SERVICE_URL is set,
    otherwise query the database in-process.
    """
    if ROOMS_SERVICE_URL:
        return RoomsApiClient(ROOMS_SERVICE_URL)
    return LocalRoomsSource()


def get_query_client(request: Request) -> QueryClient:
    return request.app.state.query_client


def get_source(request: Request) -> RoomsSource:
    return request.app.state.rooms_source


def render_document(title: str, body: str, refresh: bool = False) -> str:
    meta = '<meta http-equiv="refresh" content="1">' if refresh else ""
    return (
        "<!DOCTYPE html>"
        f'<html><head><meta charset="utf-8"><title>{escape(title)}</title>{meta}</head>'
        f"<body><main>{body}</main></body></html>"
    )


async def render_page(request: Request, view: RoomsView, title: str, heading: str = "") -> HTMLResponse:
    view.mount()
    state = await view.wait(request.app.state.render_timeout)
    body = heading + view.render()
    return HTMLResponse(render_document(title, body, refresh=state.status is QueryStatus.LOADING))


@router.get("/", response_class=HTMLResponse)
async def rooms_page(
    request: Request,
    query_client: QueryClient = Depends(get_query_client),
    source: RoomsSource = Depends(get_source),
):
    """
    Page listing every room by name.

    Renders Loading while the fetch is still running after the render
    timeout, the error with a Retry button on failure.
    """
    view = RoomListView(query_client, source)
    return await render_page(request, view, "Rooms", heading="<h1>Fetch All Rooms</h1>")


@router.post("/retry")
async def retry_rooms(
    query_client: QueryClient = Depends(get_query_client),
    source: RoomsSource = Depends(get_source),
):
    RoomListView(query_client, source).retry()
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/room/{room_id}", response_class=HTMLResponse)
async def room_page(
    room_id: str,
    request: Request,
    query_client: QueryClient = Depends(get_query_client),
    source: RoomsSource = Depends(get_source),
):
    """
    Detail page for the room addressed by ``room_id``.
    """
    view = RoomDetailView(query_client, source, room_id)
    return await render_page(request, view, "Room details")


@router.post("/room/{room_id}/retry")
async def retry_room(
    room_id: str,
    query_client: QueryClient = Depends(get_query_client),
    source: RoomsSource = Depends(get_source),
):
    RoomDetailView(query_client, source, room_id).retry()
    return RedirectResponse(url=room_url(room_id), status_code=status.HTTP_303_SEE_OTHER)


def create_app(
    source_factory: Callable[[], RoomsSource] = build_source,
    render_timeout: float = RENDER_TIMEOUT,
    query_cache_size: int = QUERY_CACHE_SIZE,
) -> FastAPI:
    """
    Build the rooms web application.

    The QueryClient and the data source live for exactly one application
    lifespan: created on startup, closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        source = source_factory()
        async with QueryClient(max_entries=query_cache_size) as query_client:
            app.state.query_client = query_client
            app.state.rooms_source = source
            app.state.render_timeout = render_timeout
            logger.info("rooms_web_started", source=type(source).__name__)
            try:
                yield
            finally:
                await source.aclose()
                logger.info("rooms_web_stopped")

    web_app = FastAPI(title="Rooms Web", version="1.0.0", lifespan=lifespan)

    @web_app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            exc_info=exc,
        )
        return HTMLResponse(
            render_document("Error", '<p class="error">Internal server error</p>'),
            status_code=500,
        )

    web_app.include_router(router)
    return web_app


app = create_app()
