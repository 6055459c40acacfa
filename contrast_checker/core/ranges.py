"""Split styled text into ranges of constant foreground/background colour.

A text of length N gets one partition per span kind: an ordered, gap-free
list of ColorRangeInfo covering [0, N), seeded with the element's default
colour and overwritten by each colour span in turn. The two partitions are
then swept together into ColorPairs.

Example:
    text 'Hello world', default fg black, fg span [6, 11) red,
    default bg white, bg span [0, 5) yellow
    -> [0,5) black/yellow, [5,6) black/white, [6,11) red/white
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from contrast_checker.core.color import color_to_hex
from contrast_checker.core.types import ColorSpan, SpanKind, StyledText


@dataclass(frozen=True)
class ColorRangeInfo:
    """A text range and its colour. ``color`` is None where no colour is defined."""

    start: int
    end: int
    color: int | None

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f'start {self.start} should be before end {self.end}')

    def __repr__(self) -> str:
        color = None if self.color is None else color_to_hex(self.color)
        return f'ColorRangeInfo(range=[{self.start},{self.end}] color={color})'


@dataclass(frozen=True)
class ColorPair:
    """A foreground/background colour pair and the text range it covers."""

    start: int
    end: int
    foreground: int | None
    background: int | None


def color_range_infos(
    length: int,
    spans: Iterable[ColorSpan],
    default_color: int | None,
) -> tuple[ColorRangeInfo, ...]:
    """Partition [0, length) by the colours of ``spans`` over ``default_color``.

    Spans may be given in any order. Where spans overlap, the later one wins.
    """
    infos = [ColorRangeInfo(0, length, default_color)]

    for span in spans:
        start, end = span.start, span.end
        if start == end:
            continue

        # Entries touched by the span: first whose end >= start, last whose start <= end.
        first = 0
        while infos[first].end < start:
            first += 1
        last = len(infos) - 1
        while infos[last].start > end:
            last -= 1
        first_info = infos[first]
        last_info = infos[last]

        replacement = []
        if first_info.start < start:
            replacement.append(ColorRangeInfo(first_info.start, start, first_info.color))
        replacement.append(ColorRangeInfo(start, end, span.color))
        if end < last_info.end:
            replacement.append(ColorRangeInfo(end, last_info.end, last_info.color))
        infos[first : last + 1] = replacement

    return tuple(infos)


def color_pairs(
    foreground_infos: tuple[ColorRangeInfo, ...],
    background_infos: tuple[ColorRangeInfo, ...],
) -> tuple[ColorPair, ...]:
    """Intersect a foreground partition with a background partition.

    Both inputs must cover the same range. The result is contiguous and
    covers that range exactly once.
    """
    pairs = []
    fg_index = 0
    bg_index = 0
    while fg_index < len(foreground_infos) or bg_index < len(background_infos):
        fg = foreground_infos[fg_index]
        bg = background_infos[bg_index]
        pairs.append(ColorPair(max(fg.start, bg.start), min(fg.end, bg.end), fg.color, bg.color))
        if fg.end == bg.end:
            fg_index += 1
            bg_index += 1
        elif fg.end < bg.end:
            fg_index += 1
        else:
            bg_index += 1
    return tuple(pairs)


def text_color_pairs(
    text: StyledText,
    default_foreground: int | None,
    default_background: int | None,
) -> tuple[ColorPair, ...]:
    """Colour pairs for a styled text, both partitions built from its spans."""
    return color_pairs(
        color_range_infos(len(text), text.spans_of(SpanKind.FOREGROUND), default_foreground),
        color_range_infos(len(text), text.spans_of(SpanKind.BACKGROUND), default_background),
    )
