"""Tests for contrast_checker.core.report: text and JSON formatting."""

import json

import pytest
from contrast_checker.core.report import describe, format_json, format_text, metadata_to_json, rank_by_shortfall
from contrast_checker.core.types import (
    KEY_ADDITIONAL_FOREGROUND_COLORS,
    KEY_BACKGROUND_COLOR,
    KEY_BACKGROUND_OPACITY,
    KEY_CONTRAST_RATIO,
    KEY_CUSTOMIZED_CONTRAST_RATIO,
    KEY_FOREGROUND_COLOR,
    KEY_REQUIRED_CONTRAST_RATIO,
    KEY_RESULT_TEXT_SUBSTRING,
    KEY_TEXT_COLOR,
    CheckResult,
    Rect,
    Report,
    ResultId,
    ResultType,
)


def _error(element_id: int, ratio: float, required: float = 4.5) -> CheckResult:
    return CheckResult(
        element_id,
        ResultType.ERROR,
        ResultId.TEXTVIEW_CONTRAST_NOT_SUFFICIENT,
        {
            KEY_REQUIRED_CONTRAST_RATIO: required,
            KEY_CONTRAST_RATIO: ratio,
            KEY_TEXT_COLOR: 0xFFEEEEEE,
            KEY_BACKGROUND_COLOR: 0xFFFFFFFF,
        },
    )


def _report() -> Report:
    report = Report(image_path='shot.png', image_width=200, image_height=100, hierarchy_path='/tmp/tree.json')
    report.set_bounds('2', Rect(0, 0, 200, 40))
    report.extend_results(
        [
            CheckResult(1, ResultType.NOT_RUN, ResultId.NOT_TEXT_VIEW),
            _error(2, 4.0),
            _error(3, 1.2),
            CheckResult(
                4,
                ResultType.WARNING,
                ResultId.TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT,
                {KEY_FOREGROUND_COLOR: 0xFFCCCCCC, KEY_BACKGROUND_COLOR: 0xFFFFFFFF, KEY_CONTRAST_RATIO: 1.6},
            ),
        ]
    )
    return report


class TestCheckResult:
    def test_outcome(self):
        assert _error(1, 2.0).outcome == 'fail'
        assert CheckResult(1, ResultType.NOT_RUN, ResultId.NOT_VISIBLE).outcome == 'not_applicable'

    def test_shortfall(self):
        assert _error(1, 4.0).shortfall == 0.5
        assert CheckResult(1, ResultType.NOT_RUN, ResultId.NOT_VISIBLE).shortfall is None

    def test_customized_ratio_preferred(self):
        r = CheckResult(
            1,
            ResultType.ERROR,
            ResultId.CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT,
            {KEY_CUSTOMIZED_CONTRAST_RATIO: 7.0, KEY_CONTRAST_RATIO: 5.0},
        )
        assert r.required_ratio == 7.0

    def test_metadata_read_only(self):
        r = _error(1, 2.0)
        with pytest.raises(TypeError):
            r.metadata[KEY_CONTRAST_RATIO] = 9.0  # type: ignore[index]
        assert r.metadata[KEY_CONTRAST_RATIO] == 2.0


class TestRanking:
    def test_largest_shortfall_first(self):
        ranked = rank_by_shortfall(_report().results)
        assert [r.element_id for r in ranked] == [3, 2]


class TestMetadataToJson:
    def test_colours_as_hex(self):
        md = metadata_to_json(
            {
                KEY_TEXT_COLOR: 0xFF000000,
                KEY_BACKGROUND_COLOR: 0x80FFFFFF,
                KEY_ADDITIONAL_FOREGROUND_COLORS: (0xFF123456,),
                KEY_CONTRAST_RATIO: 2.5,
            }
        )
        assert md == {
            KEY_TEXT_COLOR: '#000000',
            KEY_BACKGROUND_COLOR: '#80ffffff',
            KEY_ADDITIONAL_FOREGROUND_COLORS: ['#123456'],
            KEY_CONTRAST_RATIO: 2.5,
        }


class TestDescribe:
    def test_error(self):
        line = describe(_error(2, 4.0))
        assert 'TEXTVIEW_CONTRAST_NOT_SUFFICIENT' in line
        assert 'ratio 4.00 < 4.50' in line
        assert '#eeeeee on #ffffff' in line

    def test_translucent(self):
        r = CheckResult(
            2,
            ResultType.NOT_RUN,
            ResultId.BACKGROUND_MUST_BE_OPAQUE,
            {KEY_BACKGROUND_OPACITY: 50.2, KEY_RESULT_TEXT_SUBSTRING: 'world'},
        )
        line = describe(r)
        assert '50% opaque' in line
        assert "'world'" in line


class TestFormatText:
    def test_sections_and_summary(self):
        text = format_text(_report())
        assert text.startswith('contrast-tool: shot.png (200×100) | tree.json')
        assert '── 2 [0,0→200,40]' in text
        assert '✗ TEXTVIEW_CONTRAST_NOT_SUFFICIENT' in text
        assert '! TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT' in text
        assert '- NOT_TEXT_VIEW' in text
        assert 'Worst contrast:' in text
        assert text.splitlines()[-1] == 'ERROR 2  WARNING 1  NOT RUN 1'

    def test_swatch_section(self):
        report = Report(image_path='b.png', image_width=10, image_height=10)
        report.add('full', 'swatch', {'background': '#ffffff', 'foregrounds': ['#000000'], 'ratios': [21.0]})
        assert 'swatch: bg #ffffff  fg #000000 (21.00:1)' in format_text(report)

    def test_no_results(self):
        text = format_text(Report(image_path='b.png', image_width=10, image_height=10))
        assert 'ERROR' not in text


class TestFormatJson:
    def test_structure(self):
        obj = json.loads(format_json(_report()))
        assert obj['image'] == 'shot.png'
        assert obj['dimensions'] == {'width': 200, 'height': 100}
        assert obj['hierarchy'] == '/tmp/tree.json'
        assert obj['elements'][0]['bounds'] == [0, 0, 200, 40]
        assert obj['results'][1] == {
            'element': 2,
            'id': 8,
            'name': 'TEXTVIEW_CONTRAST_NOT_SUFFICIENT',
            'type': 'error',
            'metadata': {
                KEY_REQUIRED_CONTRAST_RATIO: 4.5,
                KEY_CONTRAST_RATIO: 4.0,
                KEY_TEXT_COLOR: '#eeeeee',
                KEY_BACKGROUND_COLOR: '#ffffff',
            },
        }
        assert obj['summary']['total'] == 4
        assert obj['summary']['error'] == 2
        assert obj['summary']['warning'] == 1
        assert obj['summary']['not_run'] == 1
        assert [w['element'] for w in obj['summary']['worst']] == [3, 2]
