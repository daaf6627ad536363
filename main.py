#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Главный файл приложения выделения границ оператором Шарра.

Поддерживает GUI интерфейс (tkinter) и запуск без интерфейса.

Использование:
    python main.py                                # Запуск GUI интерфейса
    python main.py image.png                      # GUI с загрузкой изображения
    python main.py image.png --output edges.png   # Без интерфейса
    python main.py image.png -o edges.png --normalize --in-place --workers 4
    python main.py image.png -o edges.png --compare side_by_side.png
"""

import sys
import argparse
import logging
from utils.logging_utils import setup_logger, set_log_level

logger = setup_logger("main")


def parse_arguments(argv=None):
    """
    Парсит аргументы командной строки.

    Args:
        argv: Список аргументов (по умолчанию sys.argv[1:])

    Returns:
        Объект с аргументами
    """
    parser = argparse.ArgumentParser(
        description="Выделение границ оператором Шарра",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  python main.py                              # GUI интерфейс
  python main.py image.png                    # GUI с изображением
  python main.py image.png -o edges.png       # без интерфейса
  python main.py image.png -o e.png --normalize --workers 4
        """
    )

    parser.add_argument(
        "image_path",
        nargs="?",
        help="Путь к изображению для загрузки"
    )
    parser.add_argument(
        "-o", "--output",
        help="Сохранить карту границ без запуска GUI"
    )
    parser.add_argument(
        "--compare",
        help="Сохранить исходное изображение и карту границ рядом (только с --output)"
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Делить модуль градиента на 8"
    )
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Записывать результат в исходный буфер"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Число потоков (0 = автоматически)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Подробный вывод"
    )

    args = parser.parse_args(argv)
    if args.workers < 0:
        parser.error("--workers не может быть отрицательным")
    if args.output and not args.image_path:
        parser.error("--output требует путь к изображению")
    if args.compare and not args.output:
        parser.error("--compare используется только вместе с --output")
    return args


def run_batch(args) -> int:
    """
    Обрабатывает изображение без интерфейса.

    Returns:
        Код возврата процесса
    """
    from controllers.batch_controller import BatchController

    controller = BatchController(
        normalize=args.normalize, in_place=args.in_place, workers=args.workers
    )
    return 0 if controller.run(args.image_path, args.output, args.compare) else 1


def run_gui_interface(image_path=None):
    """
    Запускает GUI интерфейс.

    Args:
        image_path: Путь к изображению для загрузки
    """
    from controllers.gui_controller import GUIController

    logger.info("Запуск GUI интерфейса...")
    controller = GUIController()

    if image_path:
        controller._load_image(image_path)

    controller.run()


def main(argv=None) -> int:
    """Главная функция приложения."""
    try:
        args = parse_arguments(argv)
        if args.verbose:
            set_log_level(logging.DEBUG)

        if args.output:
            return run_batch(args)

        run_gui_interface(args.image_path)
        return 0

    except KeyboardInterrupt:
        logger.warning("Приложение прервано пользователем")
        return 1
    except Exception as e:
        logger.exception(f"Ошибка: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
