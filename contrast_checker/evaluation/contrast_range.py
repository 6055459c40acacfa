"""Bounded contrast evaluation for text on a translucent background.

The true rendered background depends on whatever lies behind the element, so
only the worst and best possible ratios are known:

  upper bound below required -> ERROR, no backdrop can rescue it
  lower bound below required -> WARNING, escalated to the heuristic evaluator
  both bounds sufficient     -> pass
"""

from __future__ import annotations

import structlog

from contrast_checker.core.color import contrast_ratio_range, is_below
from contrast_checker.core.config import CheckParameters
from contrast_checker.core.hierarchy import Element, Hierarchy
from contrast_checker.core.types import (
    KEY_BACKGROUND_COLOR,
    KEY_CONTRAST_RATIO,
    KEY_RESULT_TEXT_SUBSTRING,
    KEY_TEXT_COLOR,
    CheckResult,
    ResultId,
    ResultType,
)
from contrast_checker.evaluation.lightweight import required_ratio

logger = structlog.get_logger()


def evaluate_contrast_range(
    element: Element,
    hierarchy: Hierarchy,
    parameters: CheckParameters,
    signal: CheckResult,
) -> CheckResult | None:
    """Evaluate a BACKGROUND_MUST_BE_OPAQUE signal from the lightweight evaluator."""
    if signal.result_id is not ResultId.BACKGROUND_MUST_BE_OPAQUE:
        raise ValueError(f'Expected a translucent background signal, got {signal.result_id.name}')

    text_color = signal.metadata[KEY_TEXT_COLOR]
    background_color = signal.metadata[KEY_BACKGROUND_COLOR]

    required, required_key = required_ratio(element, hierarchy, parameters)
    customized = parameters.custom_contrast_ratio is not None

    metadata: dict = {KEY_TEXT_COLOR: text_color, KEY_BACKGROUND_COLOR: background_color}
    substring = signal.metadata.get(KEY_RESULT_TEXT_SUBSTRING, '')
    if substring:
        metadata[KEY_RESULT_TEXT_SUBSTRING] = substring
    metadata[required_key] = required

    lower, upper = contrast_ratio_range(text_color, background_color)
    logger.debug('contrast_range', element_id=element.id, lower=lower, upper=upper, required=required)

    if is_below(required, upper):
        metadata[KEY_CONTRAST_RATIO] = upper
        result_id = (
            ResultId.CUSTOMIZED_TEXTVIEW_UPPER_BOUND_CONTRAST_NOT_SUFFICIENT
            if customized
            else ResultId.TEXTVIEW_UPPER_BOUND_CONTRAST_NOT_SUFFICIENT
        )
        return CheckResult(element.id, ResultType.ERROR, result_id, metadata)

    if is_below(required, lower):
        metadata[KEY_CONTRAST_RATIO] = lower
        result_id = (
            ResultId.CUSTOMIZED_TEXTVIEW_LOWER_BOUND_CONTRAST_NOT_SUFFICIENT
            if customized
            else ResultId.TEXTVIEW_LOWER_BOUND_CONTRAST_NOT_SUFFICIENT
        )
        return CheckResult(element.id, ResultType.WARNING, result_id, metadata)

    return None
