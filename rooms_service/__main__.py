import os

import uvicorn


def main() -> None:
    """Serve the Rooms service API with uvicorn."""
    uvicorn.run(
        "rooms_service.main:app",
        host=os.getenv("ROOMS_SERVICE_HOST", "0.0.0.0"),
        port=int(os.getenv("ROOMS_SERVICE_PORT", "8001")),
    )


if __name__ == "__main__":
    main()
