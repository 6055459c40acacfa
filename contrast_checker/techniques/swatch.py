"""Extract the background and foreground colours behind each text element.

For every visible text element in --hierarchy, crops the screenshot to the
element's glyph box (or its bounds) and reports the dominant background
colour, the candidate foreground colours and their contrast ratios. Without
a hierarchy the whole image is treated as one region.

Useful for checking what the heuristic evaluation of 'contrast' sees.
--enhanced lists every foreground candidate instead of the strongest one.

Example:
    uv run contrast-tool swatch ./tmp screenshot.png --hierarchy tree.json
    uv run contrast-tool swatch ./tmp button.png --enhanced
"""

from contrast_checker.core.color import color_to_hex
from contrast_checker.core.hierarchy import TextRole
from contrast_checker.core.swatch import ContrastSwatch, extract_swatch
from contrast_checker.core.types import CaptureContext, Rect, Report, Technique
from contrast_checker.evaluation.heuristic import evaluation_bounds

technique = Technique(
    name='swatch',
    help='Background/foreground colours and ratios per text element, from screenshot pixels.',
)


def _swatch_data(swatch: ContrastSwatch) -> dict:
    return {
        'background': color_to_hex(swatch.background_color),
        'foregrounds': [color_to_hex(c) for c in swatch.foreground_colors],
        'ratios': [round(r, 2) for r in swatch.contrast_ratios],
        'uniform': swatch.is_uniform,
    }


@technique.run
def run(context: CaptureContext, report: Report, args) -> None:
    if context.image is None:
        return
    enhanced = args.parameters.enhanced_contrast_evaluation
    capture_bounds = Rect(0, 0, context.image.width, context.image.height)

    if context.hierarchy is None:
        report.set_bounds('full', capture_bounds)
        report.add('full', 'swatch', _swatch_data(extract_swatch(context.image, enhanced)))
        return

    for element in context.hierarchy.walk():
        if not element.visible or element.text_role is TextRole.NONE:
            continue
        bounds = evaluation_bounds(element, capture_bounds)
        key = str(element.id)
        report.set_bounds(key, bounds)
        if bounds.is_empty or not capture_bounds.contains(bounds):
            report.add(key, 'swatch', {'error': 'outside screenshot'})
            continue
        swatch = extract_swatch(context.image.crop(bounds.as_box()), enhanced)
        report.add(key, 'swatch', _swatch_data(swatch))
