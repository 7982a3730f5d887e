from typing import List

from fastapi import Depends, FastAPI, HTTPException, status, Request, APIRouter
from fastapi.responses import JSONResponse

from sqlalchemy.orm import Session

from common.logging_config import configure_logging, get_logger

from . import schemas
from .actions import fetch_all_rooms, get_room_by_id
from .database import Base, engine, get_db

SERVICE_NAME = "rooms"

configure_logging(service_name=SERVICE_NAME)
logger = get_logger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Rooms Service", version="1.0.0")

router_v1 = APIRouter(prefix="/api/v1")

ERROR_STATUS = {
    schemas.RoomErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    schemas.RoomErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "service": SERVICE_NAME,
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "service": SERVICE_NAME,
            "path": request.url.path,
            "method": request.method,
            "status_code": 500,
            "detail": "Internal server error",
        },
    )


@app.get("/")
def root():
    """
    Health-check endpoint for the Rooms service.

    Returns
    -------
    dict
        A small JSON payload indicating that the service is running.
    """
    return {"service": "rooms", "status": "running"}


def raise_for_error(result) -> None:
    if not result.ok:
        raise HTTPException(status_code=ERROR_STATUS[result.error_kind], detail=result.error)


@router_v1.get("/rooms", response_model=List[schemas.RoomRead])
def list_rooms(db: Session = Depends(get_db)):
    """
    Retrieve every room.

    Parameters
    ----------
    db : Session
        Database session.

    Returns
    -------
    List[RoomRead]
        All rooms ordered by name; an empty list when there are none.

    Raises
    ------
    HTTPException
        503 if the store could not be queried.
    """
    result = fetch_all_rooms(db)
    raise_for_error(result)
    return result.data


@router_v1.get("/rooms/{room_id}", response_model=schemas.RoomRead)
def get_room(room_id: str, db: Session = Depends(get_db)):
    """
    Retrieve a single room by its ID.

    Parameters
    ----------
    room_id : str
        Identifier of the room.
    db : Session
        Database session.

    Returns
    -------
    RoomRead
        The requested room.

    Raises
    ------
    HTTPException
        404 if the room does not exist, 503 if the store could not be queried.
    """
    result = get_room_by_id(db, room_id)
    raise_for_error(result)
    return result.data


app.include_router(router_v1)
