import uvicorn

from .config import GuestbookSettings
from .log import configure_logging
from .main import create_app


def main() -> None:
    settings = GuestbookSettings()
    configure_logging(settings.log_level, json_output=settings.log_json)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
