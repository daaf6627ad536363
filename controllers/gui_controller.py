#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Контроллер для GUI интерфейса.
Связывает UI с бизнес-логикой.
"""

from models.image_processor import ImageProcessor
from models.image_analyzer import ImageAnalyzer
from models.scharr_filter import ScharrFilterError
from views.main_window import MainWindow
from utils.file_utils import validate_image_path
from utils.logging_utils import setup_logger

logger = setup_logger("gui")


class GUIController:
    """
    Контроллер для управления GUI интерфейсом.
    """

    def __init__(self):
        """Инициализация контроллера."""
        self.processor = ImageProcessor()
        self.analyzer = ImageAnalyzer()
        self.main_window = MainWindow()

        self.main_window.set_callbacks(
            on_load=self._load_image,
            on_run=self._run_filter,
            on_save=self._save_image,
        )

    def _load_image(self, path: str):
        """
        Загружает изображение.

        Args:
            path: Путь к изображению
        """
        if not validate_image_path(path):
            self.main_window.update_status(f"Ошибка: Неверный формат файла: {path}")
            return

        if self.processor.load_image(path):
            self.main_window.show_source(self.processor.original_image)
            self.main_window.clear_result()
            self.main_window.set_run_enabled(True)
            self.main_window.update_status(f"Загружено: {path}")
        else:
            self.main_window.update_status(f"Ошибка загрузки: {path}")

    def _run_filter(self):
        """Запускает оператор Шарра с параметрами из UI и показывает время выполнения."""
        if self.processor.original_image is None:
            self.main_window.update_status("Сначала загрузите изображение")
            return

        ui_params = self.main_window.get_parameters()
        self.processor.set_parameter("normalize", bool(ui_params["normalize"]))
        self.processor.set_parameter("in_place", bool(ui_params["in_place"]))
        self.processor.set_parameter("workers", max(0, int(ui_params["workers"])))

        try:
            edges = self.processor.process_image()
        except ScharrFilterError as exc:
            logger.error(f"Ошибка фильтра: {exc}")
            self.main_window.show_error(f"Ошибка выполнения: {exc}")
            return

        self.main_window.show_result(edges)
        self.main_window.update_histogram_display(self.analyzer.make_histogram_image(edges))

        stats = self.analyzer.edge_statistics(edges)
        stats_info = f"Время: {self.processor.last_elapsed_ms:.2f} мс\n"
        stats_info += f"Средний |G|: {stats['mean']:.2f}\n"
        stats_info += f"Максимум |G|: {stats['max']:.0f}\n"
        stats_info += f"Доля границ: {stats['edge_ratio'] * 100:.1f}%"
        self.main_window.update_stats_info(stats_info)

        mode = "normalize /8" if ui_params["normalize"] else "raw"
        self.main_window.update_status(
            f"Время выполнения ({mode}): {self.processor.last_elapsed_ms:.2f} мс"
        )

    def _save_image(self, path: str):
        """
        Сохраняет карту границ.

        Args:
            path: Путь к выходному файлу
        """
        if self.processor.save_image(path):
            self.main_window.update_status(f"Сохранено: {path}")
        else:
            self.main_window.update_status(f"Ошибка сохранения: {path}")

    def run(self):
        """Запускает приложение."""
        self.main_window.run()
