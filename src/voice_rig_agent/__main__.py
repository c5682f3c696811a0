"""Entry point for `python -m voice_rig_agent`."""

import uvicorn

from .config import settings


def main():
    uvicorn.run(
        "voice_rig_agent.app:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
