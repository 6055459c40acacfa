"""Exact contrast evaluation from declared text and background colours.

No pixels involved: the element's text colour, background colour and colour
spans are merged into colour pairs, and each pair with an opaque background
gets an exact WCAG ratio. Pairs on a translucent background cannot be
decided here and are returned as BACKGROUND_MUST_BE_OPAQUE signals for the
contrast range evaluation.
"""

from __future__ import annotations

import structlog

from contrast_checker.core.color import (
    CONTRAST_RATIO_WCAG_LARGE_TEXT,
    CONTRAST_RATIO_WCAG_NORMAL_TEXT,
    OPAQUE_ALPHA,
    WCAG_LARGE_BOLD_TEXT_MIN_SIZE,
    WCAG_LARGE_TEXT_MIN_SIZE,
    alpha,
    composite,
    contrast_ratio,
    is_below,
)
from contrast_checker.core.config import CheckParameters
from contrast_checker.core.hierarchy import Element, Hierarchy
from contrast_checker.core.ranges import text_color_pairs
from contrast_checker.core.types import (
    KEY_BACKGROUND_COLOR,
    KEY_BACKGROUND_OPACITY,
    KEY_CONTRAST_RATIO,
    KEY_CUSTOMIZED_CONTRAST_RATIO,
    KEY_REQUIRED_CONTRAST_RATIO,
    KEY_RESULT_TEXT_SUBSTRING,
    KEY_TEXT_COLOR,
    CheckResult,
    ResultId,
    ResultType,
    SpanKind,
    StyledText,
)

logger = structlog.get_logger()


def evaluated_text(element: Element) -> StyledText | None:
    """The text if it is non-empty, else the hint text."""
    if element.text is not None and len(element.text) > 0:
        return element.text
    return element.hint_text


def default_foreground(element: Element) -> int | None:
    """Colour painting the text, or the hint when the text is empty."""
    if element.text is not None and len(element.text) > 0:
        return element.text_color
    return element.hint_text_color


def is_large_text(element: Element, hierarchy: Hierarchy) -> bool | None:
    """WCAG large text classification; None when the text size is unknown."""
    if element.text_size is None:
        return None
    dp_size = element.text_size / hierarchy.device.scaled_density
    return dp_size >= WCAG_LARGE_TEXT_MIN_SIZE or (dp_size >= WCAG_LARGE_BOLD_TEXT_MIN_SIZE and element.bold)


def required_ratio(element: Element, hierarchy: Hierarchy, parameters: CheckParameters) -> tuple[float, str]:
    """Required ratio and the metadata key it is reported under."""
    if parameters.custom_contrast_ratio is not None:
        return parameters.custom_contrast_ratio, KEY_CUSTOMIZED_CONTRAST_RATIO
    if is_large_text(element, hierarchy):
        return CONTRAST_RATIO_WCAG_LARGE_TEXT, KEY_REQUIRED_CONTRAST_RATIO
    return CONTRAST_RATIO_WCAG_NORMAL_TEXT, KEY_REQUIRED_CONTRAST_RATIO


def _has_color(default: int | None, text: StyledText, kind: SpanKind) -> bool:
    return default is not None or bool(text.spans_of(kind))


def evaluate_lightweight(
    element: Element,
    hierarchy: Hierarchy,
    parameters: CheckParameters,
) -> tuple[CheckResult, ...]:
    """Evaluate every colour pair of the element's text. Empty when all pass."""
    text = evaluated_text(element)
    if text is None:
        return ()

    foreground = default_foreground(element)
    if not _has_color(foreground, text, SpanKind.FOREGROUND):
        return (CheckResult(element.id, ResultType.NOT_RUN, ResultId.COULD_NOT_GET_TEXT_COLOR),)
    if not _has_color(element.background_color, text, SpanKind.BACKGROUND):
        return (CheckResult(element.id, ResultType.NOT_RUN, ResultId.COULD_NOT_GET_BACKGROUND_COLOR),)

    required, required_key = required_ratio(element, hierarchy, parameters)
    customized = parameters.custom_contrast_ratio is not None

    results = []
    for pair in text_color_pairs(text, foreground, element.background_color):
        if pair.foreground is None or pair.background is None:
            continue

        metadata: dict = {}
        if pair.start > 0 or pair.end < len(text):
            metadata[KEY_RESULT_TEXT_SUBSTRING] = text.text[pair.start : pair.end]

        background_alpha = alpha(pair.background)
        if background_alpha < OPAQUE_ALPHA:
            metadata[KEY_BACKGROUND_OPACITY] = background_alpha * 100.0 / OPAQUE_ALPHA
            metadata[KEY_TEXT_COLOR] = pair.foreground
            metadata[KEY_BACKGROUND_COLOR] = pair.background
            logger.debug('translucent_background', element_id=element.id, start=pair.start, end=pair.end)
            results.append(CheckResult(element.id, ResultType.NOT_RUN, ResultId.BACKGROUND_MUST_BE_OPAQUE, metadata))
            continue

        ratio = contrast_ratio(composite(pair.foreground, pair.background), pair.background)
        if is_below(required, ratio):
            metadata[required_key] = required
            metadata[KEY_CONTRAST_RATIO] = ratio
            metadata[KEY_TEXT_COLOR] = pair.foreground
            metadata[KEY_BACKGROUND_COLOR] = pair.background
            result_id = (
                ResultId.CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT
                if customized
                else ResultId.TEXTVIEW_CONTRAST_NOT_SUFFICIENT
            )
            results.append(CheckResult(element.id, ResultType.ERROR, result_id, metadata))

    return tuple(results)
