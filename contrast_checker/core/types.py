"""Shared types for contrast-tool: Rect, ColorSpan, StyledText, CheckResult, Technique, Report."""

from __future__ import annotations

import enum
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from PIL import Image

if TYPE_CHECKING:
    from contrast_checker.core.hierarchy import Hierarchy


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in capture pixel coordinates. Right/bottom are exclusive."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.left >= self.right or self.top >= self.bottom

    def contains(self, other: Rect) -> bool:
        """True if ``other`` is non-empty and lies entirely inside this rectangle."""
        return (
            not self.is_empty
            and not other.is_empty
            and self.left <= other.left
            and self.top <= other.top
            and self.right >= other.right
            and self.bottom >= other.bottom
        )

    def intersects(self, other: Rect) -> bool:
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )

    def as_box(self) -> tuple[int, int, int, int]:
        """(x1, y1, x2, y2) as accepted by PIL's Image.crop."""
        return (self.left, self.top, self.right, self.bottom)

    def to_short_string(self) -> str:
        return f'[{self.left},{self.top}][{self.right},{self.bottom}]'

    @classmethod
    def union(cls, rects: list[Rect]) -> Rect:
        """Bounding box of ``rects``; an empty Rect when there are none."""
        if not rects:
            return EMPTY_RECT
        return cls(
            min(r.left for r in rects),
            min(r.top for r in rects),
            max(r.right for r in rects),
            max(r.bottom for r in rects),
        )


EMPTY_RECT = Rect(0, 0, 0, 0)


class SpanKind(enum.Enum):
    FOREGROUND = 'foreground'
    BACKGROUND = 'background'


@dataclass(frozen=True)
class ColorSpan:
    """A colour applied to characters [start, end) of a text."""

    start: int
    end: int
    color: int
    kind: SpanKind

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f'Malformed span range [{self.start}, {self.end})')


@dataclass(frozen=True)
class StyledText:
    """Text plus its colour spans."""

    text: str
    spans: tuple[ColorSpan, ...] = ()

    def __post_init__(self) -> None:
        for span in self.spans:
            if span.end > len(self.text):
                raise ValueError(f'Span [{span.start}, {span.end}) exceeds text length {len(self.text)}')

    def __len__(self) -> int:
        return len(self.text)

    def spans_of(self, kind: SpanKind) -> list[ColorSpan]:
        return [s for s in self.spans if s.kind is kind]


class ResultType(enum.Enum):
    """Severity of a check result."""

    NOT_RUN = 'not-run'
    WARNING = 'warning'
    ERROR = 'error'


class ResultId(enum.IntEnum):
    """Stable numeric result kinds."""

    NOT_VISIBLE = 1
    NOT_TEXT_VIEW = 2
    TEXTVIEW_EMPTY = 3
    COULD_NOT_GET_TEXT_COLOR = 4
    COULD_NOT_GET_BACKGROUND_COLOR = 5
    BACKGROUND_MUST_BE_OPAQUE = 7
    TEXTVIEW_CONTRAST_NOT_SUFFICIENT = 8
    HEURISTIC_COULD_NOT_GET_SCREENCAPTURE = 9
    VIEW_NOT_WITHIN_SCREENCAPTURE = 10
    TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT = 11
    TEXTVIEW_HEURISTIC_CONTRAST_BORDERLINE = 12
    NOT_ENABLED = 13
    SCREENCAPTURE_DATA_HIDDEN = 14
    CUSTOMIZED_TEXTVIEW_HEURISTIC_CONTRAST_NOT_SUFFICIENT = 15
    SCREENCAPTURE_UNIFORM_COLOR = 16
    CUSTOMIZED_TEXTVIEW_CONTRAST_NOT_SUFFICIENT = 22
    TEXTVIEW_UPPER_BOUND_CONTRAST_NOT_SUFFICIENT = 23
    TEXTVIEW_LOWER_BOUND_CONTRAST_NOT_SUFFICIENT = 24
    CUSTOMIZED_TEXTVIEW_UPPER_BOUND_CONTRAST_NOT_SUFFICIENT = 25
    CUSTOMIZED_TEXTVIEW_LOWER_BOUND_CONTRAST_NOT_SUFFICIENT = 26


# Metadata keys. Colours are packed ints, opacity a 0-100 float, ratios floats.
KEY_BACKGROUND_COLOR = 'background_color'
KEY_BACKGROUND_OPACITY = 'background_opacity'
KEY_CONTRAST_RATIO = 'contrast_ratio'
KEY_FOREGROUND_COLOR = 'foreground_color'
KEY_RESULT_TEXT_SUBSTRING = 'result_text_substring'
KEY_REQUIRED_CONTRAST_RATIO = 'required_contrast_ratio'
KEY_CUSTOMIZED_CONTRAST_RATIO = 'customized_contrast_ratio'
KEY_SCREENSHOT_BOUNDS = 'screenshot_bounds'
KEY_TEXT_COLOR = 'text_color'
KEY_TOLERANT_CONTRAST_RATIO = 'tolerant_contrast_ratio'
KEY_VIEW_BOUNDS = 'view_bounds'
KEY_IS_AGAINST_SCROLLABLE_EDGE = 'is_against_scrollable_edge'
KEY_ADDITIONAL_FOREGROUND_COLORS = 'additional_foreground_colors'
KEY_ADDITIONAL_CONTRAST_RATIOS = 'additional_contrast_ratios'
KEY_IS_POTENTIALLY_OBSCURED = 'is_potentially_obscured'
KEY_IS_LARGE_TEXT = 'is_large_text'

_OUTCOMES = {
    ResultType.NOT_RUN: 'not_applicable',
    ResultType.WARNING: 'warning',
    ResultType.ERROR: 'fail',
}


@dataclass(frozen=True)
class CheckResult:
    """One outcome of the text contrast check for one element.

    An element that passes produces no CheckResult at all.
    """

    element_id: int
    result_type: ResultType
    result_id: ResultId
    metadata: Mapping[str, Any] = field(default_factory=dict)
    image: Image.Image | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, 'metadata', MappingProxyType(dict(self.metadata)))

    @property
    def outcome(self) -> str:
        """'not_applicable', 'warning' or 'fail'."""
        return _OUTCOMES[self.result_type]

    @property
    def required_ratio(self) -> float | None:
        if KEY_CUSTOMIZED_CONTRAST_RATIO in self.metadata:
            return self.metadata[KEY_CUSTOMIZED_CONTRAST_RATIO]
        return self.metadata.get(KEY_REQUIRED_CONTRAST_RATIO)

    @property
    def shortfall(self) -> float | None:
        """How far the measured ratio falls below the required one."""
        required = self.required_ratio
        ratio = self.metadata.get(KEY_CONTRAST_RATIO)
        if required is None or ratio is None:
            return None
        return required - ratio


class Technique:
    """A self-registering analysis technique.

    Usage in a technique module:

        technique = Technique(name='swatch', help='Extract contrast swatches')

        @technique.run
        def run(context, report, args):
            ...
    """

    def __init__(self, name: str, help: str = '', requires_hierarchy: bool = False):
        self.name = name
        self.help = help
        self.requires_hierarchy = requires_hierarchy
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, context: CaptureContext, report: Report, args: Any) -> None:
        """Execute the technique's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Technique {self.name} has no run function')
        self._run_fn(context, report, args)


@dataclass
class CaptureContext:
    """What a technique works on: the screen capture and, optionally, the element hierarchy."""

    image: Image.Image | None
    hierarchy: Hierarchy | None = None


@dataclass
class Report:
    """Accumulates technique data and check results for text/JSON output."""

    image_path: str = ''
    image_width: int = 0
    image_height: int = 0
    hierarchy_path: str | None = None
    elements: dict[str, dict[str, Any]] = field(default_factory=dict)
    results: list[CheckResult] = field(default_factory=list)

    def add(self, key: str, technique_name: str, data: dict[str, Any]) -> None:
        """Add technique data for an element (or for the whole image)."""
        if key not in self.elements:
            self.elements[key] = {'bounds': None, 'techniques': {}}
        self.elements[key]['techniques'][technique_name] = data

    def set_bounds(self, key: str, bounds: Rect) -> None:
        if key not in self.elements:
            self.elements[key] = {'bounds': None, 'techniques': {}}
        self.elements[key]['bounds'] = list(bounds.as_box())

    def extend_results(self, results: list[CheckResult]) -> None:
        self.results.extend(results)

    def count(self, result_type: ResultType) -> int:
        return sum(1 for r in self.results if r.result_type is result_type)
