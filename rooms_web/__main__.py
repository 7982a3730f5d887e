import os

import uvicorn


def main() -> None:
    """Serve the rooms pages with uvicorn."""
    uvicorn.run(
        "rooms_web.main:app",
        host=os.getenv("ROOMS_WEB_HOST", "0.0.0.0"),
        port=int(os.getenv("ROOMS_WEB_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
