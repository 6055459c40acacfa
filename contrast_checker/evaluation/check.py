"""Text contrast check: gate, lightweight, contrast range and heuristic stages.

Per element:

  gate        not visible / not text / empty / disabled -> one NOT_RUN result, done
  lightweight exact ratios from declared colours
  range       translucent-background signals replaced by their range result;
              a range WARNING is dropped and requests the heuristic stage
  heuristic   runs when requested, or when the lightweight stage could not
              find a text or background colour; its result is appended

Stages take and return an immutable _Accumulator. Results keep the order in
which they were produced; elements are visited in pre-order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import structlog
from PIL import Image

from contrast_checker.core.config import CheckParameters
from contrast_checker.core.hierarchy import Element, Hierarchy, TextRole
from contrast_checker.core.swatch import extract_swatch
from contrast_checker.core.types import CheckResult, ResultId, ResultType
from contrast_checker.evaluation.contrast_range import evaluate_contrast_range
from contrast_checker.evaluation.heuristic import SwatchExtractor, evaluate_heuristic
from contrast_checker.evaluation.lightweight import evaluate_lightweight

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Accumulator:
    results: tuple[CheckResult, ...] = ()
    run_heuristic: bool = False


def applicability_result(element: Element) -> CheckResult | None:
    """A NOT_RUN result if the element cannot be evaluated at all."""
    result_id = None
    if not element.visible:
        result_id = ResultId.NOT_VISIBLE
    elif element.text_role is TextRole.NONE or (
        element.text_role is TextRole.TOGGLE and not element.text_character_locations
    ):
        # Toggles are only evaluated when their glyph locations are known.
        result_id = ResultId.NOT_TEXT_VIEW
    elif not element.text and not element.hint_text:
        result_id = ResultId.TEXTVIEW_EMPTY
    elif not element.enabled:
        result_id = ResultId.NOT_ENABLED
    if result_id is None:
        return None
    return CheckResult(element.id, ResultType.NOT_RUN, result_id)


def _lightweight_stage(
    acc: _Accumulator, element: Element, hierarchy: Hierarchy, parameters: CheckParameters
) -> _Accumulator:
    return replace(acc, results=acc.results + evaluate_lightweight(element, hierarchy, parameters))


def _range_stage(
    acc: _Accumulator, element: Element, hierarchy: Hierarchy, parameters: CheckParameters
) -> _Accumulator:
    results = []
    run_heuristic = acc.run_heuristic
    for result in acc.results:
        if result.result_id is ResultId.BACKGROUND_MUST_BE_OPAQUE:
            range_result = evaluate_contrast_range(element, hierarchy, parameters, result)
            if range_result is None:
                continue
            if range_result.result_type is ResultType.WARNING:
                run_heuristic = True
            else:
                results.append(range_result)
        else:
            if result.result_type is ResultType.NOT_RUN:
                run_heuristic = True
            results.append(result)
    return _Accumulator(tuple(results), run_heuristic)


def _heuristic_stage(
    acc: _Accumulator,
    element: Element,
    hierarchy: Hierarchy,
    screen_capture: Image.Image | None,
    parameters: CheckParameters,
    extract: SwatchExtractor,
) -> _Accumulator:
    if not acc.run_heuristic:
        return acc
    result = evaluate_heuristic(element, hierarchy, screen_capture, parameters, extract)
    if result is None:
        return acc
    return replace(acc, results=acc.results + (result,))


def evaluate_element(
    element: Element,
    hierarchy: Hierarchy,
    screen_capture: Image.Image | None = None,
    parameters: CheckParameters | None = None,
    extract: SwatchExtractor = extract_swatch,
) -> tuple[CheckResult, ...]:
    """All results for one element. Empty when its text contrast is sufficient."""
    parameters = parameters or CheckParameters()
    gate = applicability_result(element)
    if gate is not None:
        return (gate,)

    acc = _lightweight_stage(_Accumulator(), element, hierarchy, parameters)
    acc = _range_stage(acc, element, hierarchy, parameters)
    acc = _heuristic_stage(acc, element, hierarchy, screen_capture, parameters, extract)
    if acc.run_heuristic:
        logger.debug('heuristic_evaluation', element_id=element.id, results=len(acc.results))
    return acc.results


def run_check(
    hierarchy: Hierarchy,
    screen_capture: Image.Image | None = None,
    parameters: CheckParameters | None = None,
    from_root: int | None = None,
    extract: SwatchExtractor = extract_swatch,
) -> list[CheckResult]:
    """Run the text contrast check over the hierarchy, or the subtree at ``from_root``."""
    results: list[CheckResult] = []
    for element in hierarchy.walk(from_root):
        results.extend(evaluate_element(element, hierarchy, screen_capture, parameters, extract))
    logger.info('text_contrast_check', results=len(results), capture=screen_capture is not None)
    return results
