#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Тесты настройки логирования.
"""

import logging

import pytest

from config.settings import LOG_LEVEL, LOGGER_ROOT
from utils.logging_utils import set_log_level, setup_logger


@pytest.fixture
def restore_level():
    yield
    set_log_level(LOG_LEVEL)


def test_component_loggers_share_parent():
    logger = setup_logger("processor")
    assert logger.name == f"{LOGGER_ROOT}.processor"
    assert logger.parent is logging.getLogger(LOGGER_ROOT)
    assert not logger.handlers
    assert len(logging.getLogger(LOGGER_ROOT).handlers) == 1


def test_level_change_reaches_new_loggers(restore_level):
    existing = setup_logger("batch")
    set_log_level(logging.DEBUG)
    added_later = setup_logger("some_new_component")

    assert existing.getEffectiveLevel() == logging.DEBUG
    assert added_later.getEffectiveLevel() == logging.DEBUG


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logger("gui")
    setup_logger("gui")
    assert len(logging.getLogger(LOGGER_ROOT).handlers) == 1
