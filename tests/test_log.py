"""Tests for contrast_checker.core.log: library defaults and CLI configuration."""

import logging

import pytest
from contrast_checker.core.hierarchy import Element, Hierarchy, TextRole, Window
from contrast_checker.core.log import LOGGER_NAME, configure_library_defaults, configure_logging
from contrast_checker.core.types import Rect, StyledText
from contrast_checker.evaluation.check import evaluate_element
from PIL import Image


def _translucent_element() -> Element:
    return Element(
        id=1,
        window_id=0,
        text_role=TextRole.TEXT,
        text=StyledText('Hello'),
        text_color=0xFF000000,
        background_color=0x80000000,
        bounds=Rect(0, 0, 50, 20),
    )


class TestLibraryDefaults:
    def test_evaluation_writes_nothing_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        element = _translucent_element()
        hierarchy = Hierarchy(windows={0: Window(0, 1)}, elements={1: element})
        results = evaluate_element(element, hierarchy, Image.new('RGB', (100, 100), 'white'))
        assert results
        assert capsys.readouterr().out == ''

    def test_package_logger_has_null_handler(self):
        handlers = logging.getLogger(LOGGER_NAME).handlers
        assert any(isinstance(h, logging.NullHandler) for h in handlers)

    def test_defaults_repeatable(self):
        configure_library_defaults()
        configure_library_defaults()
        handlers = logging.getLogger(LOGGER_NAME).handlers
        assert sum(isinstance(h, logging.NullHandler) for h in handlers) == 1


class TestConfigureLogging:
    def test_unknown_level(self):
        with pytest.raises(ValueError, match='Unknown log level'):
            configure_logging('LOUD')
