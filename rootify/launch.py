from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path

import uvicorn

from .config import Settings, load_settings
from .main import create_app


def build_log_config(log_path: Path) -> dict:
    handlers: dict = {
        "file": {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": str(log_path),
            "encoding": "utf-8",
        }
    }
    handler_names = ["file"]
    # pythonw has no console; only add stderr when available.
    if getattr(sys, "stderr", None) is not None:
        handlers["stderr"] = {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }
        handler_names.append("stderr")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"}},
        "handlers": handlers,
        "loggers": {
            "uvicorn": {"handlers": handler_names, "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": handler_names, "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": handler_names, "level": "INFO", "propagate": False},
        },
        "root": {"handlers": handler_names, "level": "INFO"},
    }


def configure_logging(settings: Settings) -> Path:
    log_path = settings.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_log_config(log_path))
    return log_path


def main() -> None:
    settings = load_settings()
    log_path = configure_logging(settings)
    log = logging.getLogger("rootify.launch")
    log.info("Launching rootify")
    log.info("data_dir=%s", settings.data_dir)
    log.info("log_path=%s", log_path)

    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
