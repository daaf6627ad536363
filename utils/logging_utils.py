#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Настройка логирования приложения.

Все логгеры - дочерние для LOGGER_ROOT: обработчик и уровень задаются
только у родителя.
"""

import logging
from config.settings import LOG_FORMAT, LOG_LEVEL, LOGGER_ROOT


def _root_logger() -> logging.Logger:
    """Возвращает родительский логгер, добавляя обработчик при первом вызове."""
    root = logging.getLogger(LOGGER_ROOT)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(LOG_LEVEL)
    return root


def setup_logger(name: str) -> logging.Logger:
    """
    Возвращает логгер для компонента приложения.

    Args:
        name: Имя компонента (например, "processor")

    Returns:
        Логгер LOGGER_ROOT.<name>, наследующий уровень родителя
    """
    _root_logger()
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def set_log_level(level: int) -> None:
    """Меняет уровень всех логгеров приложения."""
    _root_logger().setLevel(level)
