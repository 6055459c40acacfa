"""Heuristic contrast evaluation from the pixels of a screen capture.

Crops the capture to the element (or to the box around its text glyphs when
that box is usable), extracts a ContrastSwatch, and compares each candidate
foreground colour's ratio against the required ratio:

  custom ratio configured -> CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT
  text size known         -> TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT (large or normal bar)
  text size unknown       -> NOT_SUFFICIENT against the large-text bar, else
                             BORDERLINE when only the normal-text bar is missed

Every outcome is a WARNING; pixels only approximate the rendered colours.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from PIL import Image

from contrast_checker.core.color import (
    CONTRAST_RATIO_WCAG_LARGE_TEXT,
    CONTRAST_RATIO_WCAG_NORMAL_TEXT,
    is_below,
)
from contrast_checker.core.config import CheckParameters
from contrast_checker.core.hierarchy import Element, Hierarchy
from contrast_checker.core.swatch import ContrastSwatch, extract_swatch
from contrast_checker.core.types import (
    KEY_ADDITIONAL_CONTRAST_RATIOS,
    KEY_ADDITIONAL_FOREGROUND_COLORS,
    KEY_BACKGROUND_COLOR,
    KEY_CONTRAST_RATIO,
    KEY_CUSTOMIZED_CONTRAST_RATIO,
    KEY_FOREGROUND_COLOR,
    KEY_IS_AGAINST_SCROLLABLE_EDGE,
    KEY_IS_LARGE_TEXT,
    KEY_IS_POTENTIALLY_OBSCURED,
    KEY_REQUIRED_CONTRAST_RATIO,
    KEY_SCREENSHOT_BOUNDS,
    KEY_TOLERANT_CONTRAST_RATIO,
    KEY_VIEW_BOUNDS,
    CheckResult,
    Rect,
    ResultId,
    ResultType,
)
from contrast_checker.evaluation.lightweight import is_large_text

logger = structlog.get_logger()

SwatchExtractor = Callable[[Image.Image, bool], ContrastSwatch]


def evaluation_bounds(element: Element, capture_bounds: Rect) -> Rect:
    """The element bounds, narrowed to its glyphs when their box is usable."""
    glyph_bounds = Rect.union(list(element.text_character_locations))
    if (
        not glyph_bounds.is_empty
        and capture_bounds.contains(glyph_bounds)
        and element.bounds.intersects(glyph_bounds)
    ):
        return glyph_bounds
    return element.bounds


def _low_candidates(swatch: ContrastSwatch, required: float) -> tuple[list[int], list[float]]:
    colors, ratios = [], []
    for color, ratio in zip(swatch.foreground_colors, swatch.contrast_ratios):
        if is_below(required, ratio):
            colors.append(color)
            ratios.append(ratio)
    return colors, ratios


def _store_colors_and_ratios(metadata: dict, background: int, colors: list[int], ratios: list[float]) -> None:
    """First colour/ratio under the primary keys, the rest as 'additional'."""
    metadata[KEY_BACKGROUND_COLOR] = background
    metadata[KEY_FOREGROUND_COLOR] = colors[0]
    metadata[KEY_CONTRAST_RATIO] = ratios[0]
    if len(colors) > 1:
        metadata[KEY_ADDITIONAL_FOREGROUND_COLORS] = tuple(colors[1:])
        metadata[KEY_ADDITIONAL_CONTRAST_RATIOS] = tuple(ratios[1:])


def evaluate_heuristic(
    element: Element,
    hierarchy: Hierarchy,
    screen_capture: Image.Image | None,
    parameters: CheckParameters,
    extract: SwatchExtractor = extract_swatch,
) -> CheckResult | None:
    """Evaluate the element from the capture. None when contrast is sufficient."""
    if screen_capture is None:
        return CheckResult(element.id, ResultType.NOT_RUN, ResultId.HEURISTIC_COULD_NOT_GET_SCREENCAPTURE)

    capture_bounds = Rect(0, 0, screen_capture.width, screen_capture.height)
    bounds = evaluation_bounds(element, capture_bounds)
    if bounds.is_empty or not capture_bounds.contains(bounds):
        # Off-screen elements sometimes report themselves visible.
        return CheckResult(
            element.id,
            ResultType.NOT_RUN,
            ResultId.VIEW_NOT_WITHIN_SCREENCAPTURE,
            {KEY_VIEW_BOUNDS: bounds.to_short_string(), KEY_SCREENSHOT_BOUNDS: capture_bounds.to_short_string()},
        )

    view_image = screen_capture.crop(bounds.as_box())
    swatch = extract(view_image, parameters.enhanced_contrast_evaluation)
    log = logger.bind(element_id=element.id)

    metadata: dict = {}
    if element.against_scrollable_edge:
        metadata[KEY_IS_AGAINST_SCROLLABLE_EDGE] = True

    background = swatch.background_color
    if swatch.is_uniform:
        hidden = parameters.redaction_color is not None and background == parameters.redaction_color
        log.debug('uniform_swatch', redacted=hidden)
        result_id = ResultId.SCREENCAPTURE_DATA_HIDDEN if hidden else ResultId.SCREENCAPTURE_UNIFORM_COLOR
        return CheckResult(element.id, ResultType.NOT_RUN, result_id, metadata)

    def warning(result_id: ResultId, colors: list[int], ratios: list[float]) -> CheckResult:
        if hierarchy.is_potentially_obscured(element):
            metadata[KEY_IS_POTENTIALLY_OBSCURED] = True
        _store_colors_and_ratios(metadata, background, colors, ratios)
        log.debug('heuristic_contrast_low', result=result_id.name, ratio=ratios[0])
        image = view_image if parameters.save_view_images else None
        return CheckResult(element.id, ResultType.WARNING, result_id, metadata, image)

    if parameters.custom_contrast_ratio is not None:
        colors, ratios = _low_candidates(swatch, parameters.custom_contrast_ratio)
        if colors:
            metadata[KEY_CUSTOMIZED_CONTRAST_RATIO] = parameters.custom_contrast_ratio
            return warning(ResultId.CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT, colors, ratios)
        return None

    large = is_large_text(element, hierarchy)
    required = CONTRAST_RATIO_WCAG_LARGE_TEXT
    if large is not None:
        metadata[KEY_IS_LARGE_TEXT] = large
        required = CONTRAST_RATIO_WCAG_LARGE_TEXT if large else CONTRAST_RATIO_WCAG_NORMAL_TEXT

    colors, ratios = _low_candidates(swatch, required)
    if colors:
        metadata[KEY_REQUIRED_CONTRAST_RATIO] = required
        return warning(ResultId.TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT, colors, ratios)

    if large is None:
        # Size unknown: text that only passes the large-text bar is borderline.
        colors, ratios = _low_candidates(swatch, CONTRAST_RATIO_WCAG_NORMAL_TEXT)
        if colors:
            metadata[KEY_REQUIRED_CONTRAST_RATIO] = CONTRAST_RATIO_WCAG_NORMAL_TEXT
            metadata[KEY_TOLERANT_CONTRAST_RATIO] = CONTRAST_RATIO_WCAG_LARGE_TEXT
            return warning(ResultId.TEXTVIEW_HEURISTIC_CONTRAST_BORDERLINE, colors, ratios)

    return None
