"""Colour and WCAG contrast arithmetic.

Colours are packed integers in 0xAARRGGBB order. Alpha 255 is opaque.

Source: Web Content Accessibility Guidelines (WCAG) 2.1
Formula: (L1 + 0.05) / (L2 + 0.05), where L is the relative luminance.

Thresholds:
- AA Large text: >= 3.0:1
- AA Normal text: >= 4.5:1
"""

from __future__ import annotations

CONTRAST_RATIO_WCAG_NORMAL_TEXT = 4.5
CONTRAST_RATIO_WCAG_LARGE_TEXT = 3.0

# Ratios within this distance below a threshold still pass (float noise).
CONTRAST_TOLERANCE = 0.01

# Text sizes in scaled pixels (sp/dp) at which WCAG "large text" applies.
WCAG_LARGE_TEXT_MIN_SIZE = 18
WCAG_LARGE_BOLD_TEXT_MIN_SIZE = 14

OPAQUE_ALPHA = 255

BLACK = 0xFF000000
WHITE = 0xFFFFFFFF

# Colour a secure window is censored with in screen captures.
COLOR_SECURE_WINDOW_CENSOR = BLACK


def argb(a: int, r: int, g: int, b: int) -> int:
    return ((a & 0xFF) << 24) | ((r & 0xFF) << 16) | ((g & 0xFF) << 8) | (b & 0xFF)


def alpha(color: int) -> int:
    return (color >> 24) & 0xFF


def red(color: int) -> int:
    return (color >> 16) & 0xFF


def green(color: int) -> int:
    return (color >> 8) & 0xFF


def blue(color: int) -> int:
    return color & 0xFF


def parse_color(value: str | int) -> int:
    """Parse '#rgb', '#rrggbb' or '#aarrggbb' (hash optional) into a packed colour.

    Integers pass through masked to 32 bits. Six-digit forms are opaque.
    """
    if isinstance(value, int):
        return value & 0xFFFFFFFF
    h = value.strip().lstrip('#')
    if len(h) == 3:
        h = ''.join(c * 2 for c in h)
    if len(h) == 6:
        h = 'ff' + h
    if len(h) != 8:
        raise ValueError(f'Invalid colour: {value!r}')
    try:
        return int(h, 16)
    except ValueError:
        raise ValueError(f'Invalid colour: {value!r}') from None


def color_to_hex(color: int) -> str:
    """'#rrggbb' for opaque colours, '#aarrggbb' otherwise."""
    if alpha(color) == OPAQUE_ALPHA:
        return f'#{color & 0xFFFFFF:06x}'
    return f'#{color & 0xFFFFFFFF:08x}'


def _srgb_to_linear(c: int) -> float:
    v = c / 255.0
    if v <= 0.03928:
        return v / 12.92
    return ((v + 0.055) / 1.055) ** 2.4


def luminance(color: int) -> float:
    """Relative luminance of the colour's RGB channels, ignoring alpha."""
    return (
        0.2126 * _srgb_to_linear(red(color))
        + 0.7152 * _srgb_to_linear(green(color))
        + 0.0722 * _srgb_to_linear(blue(color))
    )


def _ratio_from_luminance(l1: float, l2: float) -> float:
    if l1 < l2:
        l1, l2 = l2, l1
    return (l1 + 0.05) / (l2 + 0.05)


def contrast_ratio(color1: int, color2: int) -> float:
    """WCAG contrast ratio between two colours. Symmetric and always >= 1.0."""
    return _ratio_from_luminance(luminance(color1), luminance(color2))


def _composite_component(fg_c: int, fg_a: int, bg_c: int, bg_a: int, a: int) -> int:
    if a == 0:
        return 0
    return ((0xFF * fg_c * fg_a) + (bg_c * bg_a * (0xFF - fg_a))) // (a * 0xFF)


def composite(foreground: int, background: int) -> int:
    """Blend ``foreground`` over ``background`` (Porter-Duff source-over)."""
    fg_a = alpha(foreground)
    bg_a = alpha(background)
    a = 0xFF - (((0xFF - bg_a) * (0xFF - fg_a)) // 0xFF)
    return argb(
        a,
        _composite_component(red(foreground), fg_a, red(background), bg_a, a),
        _composite_component(green(foreground), fg_a, green(background), bg_a, a),
        _composite_component(blue(foreground), fg_a, blue(background), bg_a, a),
    )


def contrast_ratio_range(foreground: int, background: int) -> tuple[float, float]:
    """Bound the contrast of text drawn on a translucent background.

    The rendered background is ``background`` over some unknown opaque
    backdrop. Pure black and pure white backdrops give the darkest and
    lightest possible backgrounds. Returns ``(lower, upper)``.
    """
    ratios = []
    backgrounds = []
    for backdrop in (BLACK, WHITE):
        rendered_bg = composite(background, backdrop)
        rendered_fg = composite(foreground, rendered_bg)
        backgrounds.append(rendered_bg)
        ratios.append(contrast_ratio(rendered_fg, rendered_bg))

    lower, upper = min(ratios), max(ratios)
    if alpha(foreground) == OPAQUE_ALPHA:
        # Some backdrop in between renders the background at the text's own luminance.
        fg_lum = luminance(foreground)
        darkest, lightest = sorted(luminance(c) for c in backgrounds)
        if darkest <= fg_lum <= lightest:
            lower = 1.0
    return lower, upper


def is_below(required: float, ratio: float) -> bool:
    """True when ``ratio`` falls short of ``required`` by more than the tolerance.

    A ratio exactly ``CONTRAST_TOLERANCE`` below ``required`` passes.
    """
    # Rounded so that e.g. 3.0 - 2.99 == 0.0100000000000002 counts as the tolerance itself.
    return round(required - ratio, 9) > CONTRAST_TOLERANCE
