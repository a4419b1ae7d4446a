from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_machine_id: ContextVar[str] = ContextVar("machine_id", default="-")


@contextmanager
def machine_scope(value: Optional[str]) -> Iterator[str]:
    """Stamp log records with ``value`` for the duration of the block."""
    token = _machine_id.set(value or "-")
    try:
        yield value or "-"
    finally:
        _machine_id.reset(token)


class MachineIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.machine_id = _machine_id.get()
        return True


def get_logger(name: str = "stateml", level: int = logging.INFO) -> logging.Logger:
    """Return a logger configured with a machine-id filter and sane handler behavior."""
    logger = logging.getLogger(name)

    # Avoid duplicated handlers if called multiple times.
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - machine=%(machine_id)s - %(message)s"
        )
        handler.setFormatter(formatter)
        handler.addFilter(MachineIdFilter())
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger
