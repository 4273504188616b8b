# app/core/logging.py
# logs texte, request_id toujours présent dans le record

from __future__ import annotations
import contextvars
import logging
import logging.config
import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | req=%(request_id)s | %(name)s | %(message)s"

# "-" hors requête HTTP (tests, scripts)
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestContextFilter(logging.Filter):
    """Renseigne `record.request_id` depuis le contexte de la requête courante."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True


def _logging_config(level: str) -> Dict[str, Any]:
    # uvicorn garde ses handlers mais suit le niveau de l'application
    uvicorn_loggers = {name: {"level": level} for name in ("uvicorn", "uvicorn.error", "uvicorn.access")}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_ctx": {"()": RequestContextFilter}},
        "formatters": {"std": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "std",
                "filters": ["request_ctx"],
            },
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": uvicorn_loggers,
    }


def setup_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(_logging_config(level.upper()))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


def new_request_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def timed_step(logger: logging.Logger, step: str) -> Iterator[None]:
    """Logue (DEBUG) la durée d'une étape de pipeline."""
    t0 = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("step %s done (%.2f ms)", step, (time.perf_counter() - t0) * 1000.0)
