from __future__ import annotations

import logging
import sys

import uvicorn

from daynotes.api.main import create_app
from daynotes.config import Config
from daynotes.data.database import init_database_from_config
from daynotes.data.errors import StartupError
from daynotes.data.repository import NoteRepository

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _load_config() -> tuple[Config, int, int]:
    """Load config and validate the values needed before serving.

    Raises:
        ValueError: port or log level is not usable.
    """
    config = Config()
    port = config.api_port
    level = logging.getLevelNamesMapping().get(config.log_level)
    if level is None:
        raise ValueError(f"Unknown log level '{config.log_level}'")
    return config, port, level


def run() -> int:
    try:
        config, port, level = _load_config()
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO, format=_LOG_FORMAT, stream=sys.stdout)
        logger.error("Startup aborted: invalid configuration: %s", exc)
        return 1

    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stdout)

    try:
        db_path = init_database_from_config(config)
    except StartupError as exc:
        logger.error("Startup aborted: %s", exc)
        return 1

    app = create_app(NoteRepository(db_path), config)
    uvicorn.run(
        app,
        host=config.api_host,
        port=port,
        log_level=logging.getLevelName(level).lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
