#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Конфигурационные настройки приложения.
"""

import logging
import os

# Ядра оператора Шарра (корреляция, без переворота)
SCHARR_GX = (
    (-3, 0, 3),
    (-10, 0, 10),
    (-3, 0, 3),
)
SCHARR_GY = (
    (-3, -10, -3),
    (0, 0, 0),
    (3, 10, 3),
)
NORMALIZE_DIVISOR = 8  # делитель модуля градиента в режиме normalize

# Формат буфера: Bgr24, строки выровнены до 4 байт
BYTES_PER_PIXEL = 3
STRIDE_ALIGNMENT = 4

# Параллельная обработка
PARALLEL_MIN_PIXELS = 65_536  # меньше - однопоточно
BAND_ROWS = 64  # строк на один проход свёртки
MAX_WORKERS = max(1, os.cpu_count() or 1)

# Диапазоны значений
MAX_PIXEL_VALUE = 255
MIN_PIXEL_VALUE = 0
HISTOGRAM_BINS = 256

# Анализ границ
EDGE_THRESHOLD = 100

# Размеры для отображения
HISTOGRAM_HEIGHT = 200
HISTOGRAM_WIDTH = 512
COMPARISON_TILE_SIZE = 320

# Цвета для отображения (BGR)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)
COLOR_GRAY = (80, 80, 80)
COLOR_YELLOW = (0, 255, 255)
COLOR_TEXT = (220, 220, 220)

# Настройки GUI
GUI_SETTINGS = {
    "window_title": "Scharr Edge Detection",
    "min_window_size": (900, 600),
    "canvas_size": (420, 360),
    "histogram_size": (300, 120),
}

# Логирование
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_LEVEL = logging.INFO
LOGGER_ROOT = "scharr"  # общий родитель логгеров приложения

# Поддерживаемые форматы изображений
SUPPORTED_FORMATS = ['.bmp', '.png', '.tiff', '.tif', '.jpg', '.jpeg']
