"""Run the text contrast check over every element of a hierarchy.

Requires --hierarchy, a JSON dump of the UI element tree in the capture's
coordinate space (see contrast_checker.core.hierarchy for the format).

Per element: exact evaluation from declared text/background colours first,
contrast bounds for translucent backgrounds, and a pixel heuristic on the
screenshot when colours are unknown or the bounds are inconclusive.

Result types:
  error    insufficient contrast from exact colours (or even the best case
           of a translucent background)
  warning  insufficient contrast estimated from screenshot pixels
  not-run  element skipped (invisible, not text, off-screen, uniform, ...)

With --save-view-images, the cropped screenshot behind each warning is
saved to <tmp_dir>/<element_id>_<result_id>.png.

Example:
    uv run contrast-tool contrast ./tmp screenshot.png --hierarchy tree.json
    uv run contrast-tool contrast ./tmp screenshot.png -H tree.json --custom-ratio 7
"""

import os
import sys

from contrast_checker.core.types import CaptureContext, Report, Technique
from contrast_checker.evaluation.check import run_check

technique = Technique(
    name='contrast',
    help='Check text contrast of every element in the hierarchy (WCAG ratios).',
    requires_hierarchy=True,
)


@technique.run
def run(context: CaptureContext, report: Report, args) -> None:
    if context.hierarchy is None:
        print('contrast: --hierarchy file required', file=sys.stderr)
        return

    results = run_check(context.hierarchy, context.image, args.parameters)
    report.extend_results(results)

    for result in results:
        element = context.hierarchy.element(result.element_id)
        if not element.bounds.is_empty:
            report.set_bounds(str(element.id), element.bounds)

    saved = [r for r in results if r.image is not None]
    if saved:
        os.makedirs(args.tmp_dir, exist_ok=True)
        for result in saved:
            path = os.path.join(args.tmp_dir, f'{result.element_id}_{int(result.result_id)}.png')
            result.image.save(path)
            report.add(str(result.element_id), 'evidence', {'file': path})
