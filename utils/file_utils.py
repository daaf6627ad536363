#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Утилиты для работы с файлами.
"""

import os
from config.settings import SUPPORTED_FORMATS


def validate_image_path(path: str) -> bool:
    """
    Проверяет, является ли путь валидным файлом изображения.

    Args:
        path: Путь к файлу

    Returns:
        True если файл валиден, False иначе
    """
    if not os.path.isfile(path):
        return False

    _, ext = os.path.splitext(path.lower())
    return ext in SUPPORTED_FORMATS


def get_output_path(image_path: str, normalize: bool = False) -> str:
    """
    Генерирует имя файла для карты границ рядом с исходным.

    Args:
        image_path: Путь к исходному изображению
        normalize: Режим нормировки (добавляется в имя)

    Returns:
        Путь вида <имя>_scharr[_norm].png
    """
    base, _ = os.path.splitext(image_path)
    suffix = "_scharr_norm" if normalize else "_scharr"
    return f"{base}{suffix}.png"


def get_supported_formats_string() -> str:
    """
    Возвращает строку с поддерживаемыми форматами.

    Returns:
        Строка с форматами
    """
    return ", ".join(SUPPORTED_FORMATS)
