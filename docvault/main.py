import uvicorn

from docvault.config.settings import Settings
from docvault.database.connection import close_pool, init_pool
from docvault.logging.logger import Log
from docvault.server.api import build_app


def main() -> None:
    """Entry point: initialize pool -> build services -> serve the verification API."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        app = build_app(settings)
        Log.info(f"Serving verification API on {settings.server_host}:{settings.server_port}")
        uvicorn.run(
            app,
            host=settings.server_host,
            port=settings.server_port,
            log_level=settings.log_level.lower(),
        )
    finally:
        close_pool()


if __name__ == "__main__":
    main()
