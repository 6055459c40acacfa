"""Foreground/background separation within a small capture region.

Samples up to 5000 pixels, runs KMeans (up to 5 clusters, n_init=3). The
largest cluster is the background. Other clusters holding at least 2% of the
samples are foreground candidates; anti-aliasing fringes usually fall below
that share. If none qualify, the other cluster with the highest contrast
against the background is used.

Standard mode keeps only the candidate with the highest contrast. Enhanced
mode keeps every candidate, largest cluster first.

A region made of a single colour yields a uniform swatch whose foreground is
the background colour itself.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import structlog
from PIL import Image
from sklearn.cluster import KMeans

from contrast_checker.core.color import argb, color_to_hex, contrast_ratio

logger = structlog.get_logger()

N_CLUSTERS = 5
N_SAMPLES = 5000
MIN_FOREGROUND_SHARE = 0.02


@dataclass(frozen=True)
class ContrastSwatch:
    """Background colour plus candidate foreground colours, most confident first."""

    background_color: int
    foreground_colors: tuple[int, ...]
    contrast_ratios: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.foreground_colors or len(self.foreground_colors) != len(self.contrast_ratios):
            raise ValueError(
                f'Swatch needs matching foreground colours and ratios, got '
                f'{len(self.foreground_colors)} and {len(self.contrast_ratios)}'
            )

    @property
    def is_uniform(self) -> bool:
        return self.foreground_colors[0] == self.background_color


def _pack(rgb: np.ndarray) -> int:
    return argb(255, int(rgb[0]), int(rgb[1]), int(rgb[2]))


def extract_swatch(image: Image.Image, enhanced: bool = False) -> ContrastSwatch:
    """Extract a ContrastSwatch from a cropped region of a screen capture."""
    arr = np.array(image.convert('RGB'))
    pixels = arr.reshape(-1, 3)
    if len(pixels) == 0:
        raise ValueError('Cannot extract a swatch from an empty image')

    if len(pixels) > N_SAMPLES:
        indices = np.random.default_rng(42).choice(len(pixels), N_SAMPLES, replace=False)
        pixels = pixels[indices]

    unique = np.unique(pixels, axis=0)
    if len(unique) == 1:
        color = _pack(unique[0])
        return ContrastSwatch(color, (color,), (1.0,))

    km = KMeans(n_clusters=min(N_CLUSTERS, len(unique)), n_init=3, random_state=42)
    km.fit(pixels.astype(float))
    centres = np.clip(np.rint(km.cluster_centers_), 0, 255).astype(int)
    counts = np.bincount(km.labels_, minlength=len(centres))
    total = float(counts.sum())

    order = np.argsort(-counts, kind='stable')
    background = _pack(centres[order[0]])

    others = []
    for i in order[1:]:
        color = _pack(centres[i])
        others.append((color, counts[i] / total, contrast_ratio(color, background)))

    candidates = [o for o in others if o[1] >= MIN_FOREGROUND_SHARE]
    if not candidates:
        candidates = [max(others, key=lambda o: o[2])]

    if not enhanced:
        candidates = [max(candidates, key=lambda o: o[2])]

    swatch = ContrastSwatch(
        background_color=background,
        foreground_colors=tuple(c[0] for c in candidates),
        contrast_ratios=tuple(c[2] for c in candidates),
    )
    logger.debug(
        'swatch_extracted',
        background=color_to_hex(background),
        candidates=len(swatch.foreground_colors),
        clusters=len(centres),
    )
    return swatch
