# logging_setup.py
# Log handlers for the Flask host; the engine modules only ever call logging.getLogger(__name__).

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGS_DIR = Path(__file__).resolve().parent / "logs"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(*, environment: str) -> None:
    # Development logs DEBUG to the console; production logs INFO and also keeps logs/app.log.
    root = logging.getLogger()
    if root.handlers:
        return  # already configured (e.g. Flask reloader or tests)

    production = (environment or "").strip().lower() == "production"
    handlers = [logging.StreamHandler()]
    if production:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(LOGS_DIR / "app.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO if production else logging.DEBUG,
        format=LOG_FORMAT,
        handlers=handlers,
    )

    # Werkzeug writes one INFO line per request.
    logging.getLogger("werkzeug").setLevel(logging.WARNING if production else logging.INFO)
