#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Главное окно приложения выделения границ.
"""

import tkinter as tk
from tkinter import ttk, filedialog, messagebox
import cv2
import numpy as np
from PIL import Image, ImageTk
from typing import Optional, Callable
from config.settings import GUI_SETTINGS, MAX_WORKERS


class MainWindow:
    """
    Главное окно: исходное изображение, результат и параметры запуска.
    """

    def __init__(self):
        """Инициализация главного окна."""
        self.root = tk.Tk()
        self.root.title(GUI_SETTINGS["window_title"])
        self.root.minsize(*GUI_SETTINGS["min_window_size"])

        # PhotoImage нужно хранить, иначе tkinter их освобождает
        self.source_photo = None
        self.result_photo = None
        self.histogram_photo = None

        # Параметры запуска
        self.params = {
            "normalize": tk.BooleanVar(value=False),
            "in_place": tk.BooleanVar(value=False),
            "workers": tk.IntVar(value=0),
        }

        self.on_load: Optional[Callable[[str], None]] = None
        self.on_run: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[str], None]] = None

        self._create_widgets()
        self._setup_bindings()

    def _create_widgets(self):
        """Создает виджеты интерфейса."""
        main_frame = ttk.Frame(self.root)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

        self._create_left_panel(main_frame)
        self._create_center_panel(main_frame)
        self._create_status_bar()

    def _create_left_panel(self, parent):
        """Создает левую панель с параметрами и кнопками."""
        left_frame = ttk.LabelFrame(parent, text="Параметры", padding=10)
        left_frame.pack(side=tk.LEFT, fill=tk.Y, padx=(0, 10))

        ttk.Button(left_frame, text="Открыть...", command=self._open_image).pack(fill=tk.X, pady=(0, 10))

        ttk.Label(left_frame, text="Модуль градиента:").pack(anchor=tk.W)
        ttk.Radiobutton(
            left_frame, text="Без нормировки", value=False, variable=self.params["normalize"]
        ).pack(anchor=tk.W)
        ttk.Radiobutton(
            left_frame, text="Нормировка /8", value=True, variable=self.params["normalize"]
        ).pack(anchor=tk.W, pady=(0, 10))

        ttk.Checkbutton(
            left_frame, text="Запись в исходный буфер", variable=self.params["in_place"]
        ).pack(anchor=tk.W, pady=(0, 10))

        ttk.Label(left_frame, text="Потоки (0 = авто):").pack(anchor=tk.W)
        ttk.Spinbox(
            left_frame, from_=0, to=MAX_WORKERS, width=5, textvariable=self.params["workers"],
            state="readonly"
        ).pack(anchor=tk.W, pady=(0, 10))

        self.run_button = ttk.Button(left_frame, text="Запустить", command=self._run, state=tk.DISABLED)
        self.run_button.pack(fill=tk.X, pady=(0, 5))
        ttk.Button(left_frame, text="Сохранить...", command=self._save_image).pack(fill=tk.X, pady=(0, 10))

        stats_frame = ttk.LabelFrame(left_frame, text="Статистики", padding=5)
        stats_frame.pack(fill=tk.X, pady=(0, 10))
        self.stats_info = tk.Text(stats_frame, height=5, width=28, wrap=tk.WORD)
        self.stats_info.pack(fill=tk.BOTH, expand=True)

        hist_width, hist_height = GUI_SETTINGS["histogram_size"]
        hist_frame = ttk.LabelFrame(left_frame, text="Гистограмма |G|", padding=5)
        hist_frame.pack(fill=tk.X)
        self.histogram_canvas = tk.Canvas(hist_frame, bg="gray", width=hist_width, height=hist_height)
        self.histogram_canvas.pack()

    def _create_center_panel(self, parent):
        """Создает панель с исходным изображением и результатом."""
        canvas_width, canvas_height = GUI_SETTINGS["canvas_size"]

        source_frame = ttk.LabelFrame(parent, text="Исходное изображение", padding=5)
        source_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(0, 5))
        self.source_canvas = tk.Canvas(source_frame, bg="gray", width=canvas_width, height=canvas_height)
        self.source_canvas.pack(fill=tk.BOTH, expand=True)

        result_frame = ttk.LabelFrame(parent, text="Оператор Шарра", padding=5)
        result_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(5, 0))
        self.result_canvas = tk.Canvas(result_frame, bg="gray", width=canvas_width, height=canvas_height)
        self.result_canvas.pack(fill=tk.BOTH, expand=True)

    def _create_status_bar(self):
        """Создает строку состояния."""
        self.status_bar = ttk.Label(
            self.root, text="Готов к работе", relief=tk.SUNKEN, anchor=tk.W
        )
        self.status_bar.pack(side=tk.BOTTOM, fill=tk.X)

    def _setup_bindings(self):
        """Настраивает привязки клавиш."""
        self.root.bind("<Control-o>", lambda e: self._open_image())
        self.root.bind("<Control-s>", lambda e: self._save_image())
        self.root.bind("<F5>", lambda e: self._run())
        self.root.bind("<Escape>", lambda e: self.root.quit())

    def _open_image(self):
        """Открывает диалог выбора изображения."""
        filetypes = [
            ("Изображения", "*.bmp *.png *.tiff *.tif *.jpg *.jpeg"),
            ("Все файлы", "*.*")
        ]
        filename = filedialog.askopenfilename(title="Выберите изображение", filetypes=filetypes)
        if filename and self.on_load:
            self.status_bar.config(text=f"Загружается: {filename}")
            self.on_load(filename)

    def _run(self):
        """Запускает обработку, если она разрешена."""
        if str(self.run_button["state"]) != tk.DISABLED and self.on_run:
            self.on_run()

    def _save_image(self):
        """Сохраняет карту границ."""
        if self.result_photo is None:
            self.update_status("Нет результата для сохранения")
            return

        filetypes = [("PNG", "*.png"), ("BMP", "*.bmp"), ("TIFF", "*.tiff")]
        filename = filedialog.asksaveasfilename(
            title="Сохранить изображение", defaultextension=".png", filetypes=filetypes
        )
        if filename and self.on_save:
            self.on_save(filename)

    def _draw_on_canvas(self, canvas: tk.Canvas, image: np.ndarray) -> ImageTk.PhotoImage:
        """Масштабирует BGR изображение под canvas и рисует его."""
        pil_image = Image.fromarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))

        canvas_width = canvas.winfo_width()
        canvas_height = canvas.winfo_height()
        if canvas_width <= 1 or canvas_height <= 1:
            canvas_width, canvas_height = int(canvas["width"]), int(canvas["height"])

        # Масштаб с сохранением пропорций
        img_width, img_height = pil_image.size
        scale = min(canvas_width / img_width, canvas_height / img_height)
        new_size = (max(1, int(img_width * scale)), max(1, int(img_height * scale)))
        pil_image = pil_image.resize(new_size, Image.Resampling.NEAREST)

        photo = ImageTk.PhotoImage(pil_image)
        canvas.delete("all")
        canvas.create_image(canvas_width // 2, canvas_height // 2, image=photo, anchor=tk.CENTER)
        return photo

    def set_callbacks(self, on_load: Callable[[str], None], on_run: Callable[[], None],
                      on_save: Callable[[str], None]):
        """Устанавливает обработчики действий пользователя."""
        self.on_load = on_load
        self.on_run = on_run
        self.on_save = on_save

    def set_run_enabled(self, enabled: bool):
        """Включает или выключает кнопку запуска."""
        self.run_button.config(state=tk.NORMAL if enabled else tk.DISABLED)

    def show_source(self, image: np.ndarray):
        """Отображает исходное изображение."""
        self.source_photo = self._draw_on_canvas(self.source_canvas, image)

    def show_result(self, image: np.ndarray):
        """Отображает карту границ."""
        self.result_photo = self._draw_on_canvas(self.result_canvas, image)

    def clear_result(self):
        """Очищает результат предыдущего запуска."""
        self.result_photo = None
        self.histogram_photo = None
        self.result_canvas.delete("all")
        self.histogram_canvas.delete("all")
        self.update_stats_info("")

    def update_histogram_display(self, histogram_image: np.ndarray):
        """Обновляет отображение гистограммы."""
        self.histogram_photo = self._draw_on_canvas(self.histogram_canvas, histogram_image)

    def update_stats_info(self, info: str):
        """Обновляет статистическую информацию."""
        self.stats_info.delete(1.0, tk.END)
        self.stats_info.insert(1.0, info)

    def update_status(self, message: str):
        """Обновляет строку состояния."""
        self.status_bar.config(text=message)

    def show_error(self, message: str):
        """Показывает сообщение об ошибке."""
        self.update_status(message)
        messagebox.showerror("Ошибка", message)

    def get_parameters(self) -> dict:
        """Возвращает текущие параметры."""
        return {name: var.get() for name, var in self.params.items()}

    def run(self):
        """Запускает главный цикл приложения."""
        self.root.mainloop()
