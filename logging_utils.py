"""Utilidades de logging compartidas por los módulos de la calculadora."""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER = "calculadora"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Devuelve un logger hijo de ``calculadora`` con un único handler."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
    return logging.getLogger(name)


def configure_level(level: str | None = None) -> None:
    """Ajusta el nivel desde ``CALCULADORA_LOG_LEVEL`` o el argumento dado."""
    if level is None:
        level = os.environ.get("CALCULADORA_LOG_LEVEL", "WARNING")
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    get_logger().setLevel(resolved)


__all__ = ["get_logger", "configure_level"]
