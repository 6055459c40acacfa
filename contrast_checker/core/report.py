"""Report builder: text and JSON output for contrast-tool results."""

import json
import os
from typing import Any

from contrast_checker.core.color import color_to_hex
from contrast_checker.core.types import (
    KEY_ADDITIONAL_FOREGROUND_COLORS,
    KEY_BACKGROUND_COLOR,
    KEY_BACKGROUND_OPACITY,
    KEY_CONTRAST_RATIO,
    KEY_FOREGROUND_COLOR,
    KEY_IS_AGAINST_SCROLLABLE_EDGE,
    KEY_IS_POTENTIALLY_OBSCURED,
    KEY_RESULT_TEXT_SUBSTRING,
    KEY_SCREENSHOT_BOUNDS,
    KEY_TEXT_COLOR,
    KEY_VIEW_BOUNDS,
    CheckResult,
    Report,
    ResultType,
)

_COLOR_KEYS = {KEY_BACKGROUND_COLOR, KEY_FOREGROUND_COLOR, KEY_TEXT_COLOR}
_MARKS = {ResultType.ERROR: '✗', ResultType.WARNING: '!', ResultType.NOT_RUN: '-'}


def rank_by_shortfall(results: list[CheckResult]) -> list[CheckResult]:
    """Results that carry a measured and a required ratio, largest shortfall first."""
    ranked = [r for r in results if r.shortfall is not None]
    ranked.sort(key=lambda r: -r.shortfall)
    return ranked


def metadata_to_json(metadata: Any) -> dict[str, Any]:
    """Metadata with colours rendered as hex strings."""
    out: dict[str, Any] = {}
    for key, value in metadata.items():
        if key in _COLOR_KEYS:
            out[key] = color_to_hex(value)
        elif key == KEY_ADDITIONAL_FOREGROUND_COLORS:
            out[key] = [color_to_hex(c) for c in value]
        elif isinstance(value, tuple):
            out[key] = list(value)
        else:
            out[key] = value
    return out


def describe(result: CheckResult) -> str:
    """One-line summary of a result's data."""
    md = result.metadata
    parts = [result.result_id.name]
    if KEY_CONTRAST_RATIO in md:
        ratio = f'ratio {md[KEY_CONTRAST_RATIO]:.2f}'
        if result.required_ratio is not None:
            ratio += f' < {result.required_ratio:.2f}'
        parts.append(ratio)
    fg = md.get(KEY_TEXT_COLOR, md.get(KEY_FOREGROUND_COLOR))
    if fg is not None and KEY_BACKGROUND_COLOR in md:
        parts.append(f'{color_to_hex(fg)} on {color_to_hex(md[KEY_BACKGROUND_COLOR])}')
    if KEY_BACKGROUND_OPACITY in md:
        parts.append(f'background {md[KEY_BACKGROUND_OPACITY]:.0f}% opaque')
    if KEY_RESULT_TEXT_SUBSTRING in md:
        parts.append(f'text {md[KEY_RESULT_TEXT_SUBSTRING]!r}')
    if KEY_VIEW_BOUNDS in md:
        parts.append(f'{md[KEY_VIEW_BOUNDS]} outside {md[KEY_SCREENSHOT_BOUNDS]}')
    if md.get(KEY_IS_POTENTIALLY_OBSCURED):
        parts.append('possibly obscured')
    if md.get(KEY_IS_AGAINST_SCROLLABLE_EDGE):
        parts.append('against scrollable edge')
    return '  '.join(parts)


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    dim = f'{report.image_width}×{report.image_height}'
    header = f'contrast-tool: {report.image_path} ({dim})'
    if report.hierarchy_path:
        header += f' | {os.path.basename(report.hierarchy_path)}'
    lines.append(header)
    lines.append('')

    by_element: dict[str, list[CheckResult]] = {}
    for result in report.results:
        by_element.setdefault(str(result.element_id), []).append(result)

    for key in list(report.elements) + [k for k in by_element if k not in report.elements]:
        data = report.elements.get(key, {})
        bounds = data.get('bounds')
        b = f'[{bounds[0]},{bounds[1]}→{bounds[2]},{bounds[3]}]' if bounds else ''
        lines.append(f'── {key} {b}')

        for tech_name, tech_data in data.get('techniques', {}).items():
            if tech_name == 'swatch' and 'background' in tech_data:
                fgs = ', '.join(
                    f'{c} ({r:.2f}:1)' for c, r in zip(tech_data['foregrounds'], tech_data['ratios'])
                )
                lines.append(f'  swatch: bg {tech_data["background"]}  fg {fgs}')
            else:
                for k, v in tech_data.items():
                    lines.append(f'  {tech_name}.{k}: {v}')

        for result in by_element.get(key, []):
            lines.append(f'  {_MARKS[result.result_type]} {describe(result)}')
        lines.append('')

    ranked = rank_by_shortfall(report.results)
    if ranked:
        lines.append('Worst contrast:')
        for result in ranked[:10]:
            lines.append(f'  {result.element_id}: {result.shortfall:.2f} short ({result.result_id.name})')
        lines.append('')

    if report.results:
        lines.append(
            f'ERROR {report.count(ResultType.ERROR)}  '
            f'WARNING {report.count(ResultType.WARNING)}  '
            f'NOT RUN {report.count(ResultType.NOT_RUN)}'
        )
    return '\n'.join(lines)


def result_to_json(result: CheckResult) -> dict[str, Any]:
    return {
        'element': result.element_id,
        'id': int(result.result_id),
        'name': result.result_id.name,
        'type': result.result_type.value,
        'metadata': metadata_to_json(result.metadata),
    }


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'image': report.image_path,
        'dimensions': {'width': report.image_width, 'height': report.image_height},
    }
    if report.hierarchy_path:
        obj['hierarchy'] = report.hierarchy_path

    obj['elements'] = []
    for key, data in report.elements.items():
        obj['elements'].append(
            {
                'name': key,
                'bounds': data.get('bounds'),
                'techniques': data.get('techniques', {}),
            }
        )

    obj['results'] = [result_to_json(r) for r in report.results]
    obj['summary'] = {
        'total': len(report.results),
        'error': report.count(ResultType.ERROR),
        'warning': report.count(ResultType.WARNING),
        'not_run': report.count(ResultType.NOT_RUN),
        'worst': [
            {'element': r.element_id, 'shortfall': round(r.shortfall, 3)} for r in rank_by_shortfall(report.results)
        ],
    }
    return json.dumps(obj, indent=2)
