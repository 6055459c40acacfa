"""Check parameters, loaded from the environment and .env files.

Lookup order (first wins):
  1. OS environment variables.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Recognised keys:
  CONTRAST_CUSTOM_RATIO         required ratio overriding the WCAG thresholds
  CONTRAST_SAVE_VIEW_IMAGES     keep cropped evidence images on heuristic warnings
  CONTRAST_ENHANCED_EVALUATION  report every foreground candidate of a swatch
  CONTRAST_REDACTION_COLOR      capture redaction colour, or 'none'
  CONTRAST_LOG_LEVEL            DEBUG, INFO, WARNING or ERROR

The .env file is read, never written into os.environ.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from contrast_checker.core.color import COLOR_SECURE_WINDOW_CENSOR, parse_color

PREFIX = 'CONTRAST_'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off', ''}


class ConfigError(ValueError):
    """A configuration value could not be parsed."""


@dataclass(frozen=True)
class CheckParameters:
    custom_contrast_ratio: float | None = None
    save_view_images: bool = False
    enhanced_contrast_evaluation: bool = False
    redaction_color: int | None = COLOR_SECURE_WINDOW_CENSOR


def find_dotenv(start: Path) -> Path | None:
    """Nearest .env at or above ``start``; None past the repo root (.git)."""
    for directory in [start.resolve(), *start.resolve().parents]:
        candidate = directory / '.env'
        if candidate.is_file():
            return candidate
        if (directory / '.git').exists():
            return None
    return None


def read_dotenv(path: Path) -> dict[str, str]:
    """KEY=value lines; quotes stripped, comments and malformed lines skipped."""
    result: dict[str, str] = {}
    for raw in path.read_text(encoding='utf-8').splitlines():
        line = raw.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, value = line.partition('=')
        key = key.strip()
        if key.startswith('export '):
            key = key[len('export ') :].strip()
        if key:
            result[key] = value.strip().strip('"').strip("'")
    return result


def read_settings(env_file: str | None = None, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge CONTRAST_* settings from the .env file and the environment.

    An explicit ``env_file`` that does not exist is ignored.
    """
    environ = os.environ if environ is None else environ
    if env_file:
        path: Path | None = Path(env_file) if Path(env_file).is_file() else None
    else:
        path = find_dotenv(Path.cwd())

    settings = {k: v for k, v in read_dotenv(path).items() if k.startswith(PREFIX)} if path else {}
    settings.update({k: v for k, v in environ.items() if k.startswith(PREFIX)})
    return settings


def _bool(settings: Mapping[str, str], key: str) -> bool:
    value = settings.get(key, '').strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f'{key}: expected a boolean, got {settings[key]!r}')


def parameters_from_settings(settings: Mapping[str, str]) -> CheckParameters:
    ratio = settings.get(f'{PREFIX}CUSTOM_RATIO', '').strip()
    custom_ratio = None
    if ratio:
        try:
            custom_ratio = float(ratio)
        except ValueError:
            raise ConfigError(f'{PREFIX}CUSTOM_RATIO: expected a number, got {ratio!r}') from None
        if custom_ratio < 1.0:
            raise ConfigError(f'{PREFIX}CUSTOM_RATIO: contrast ratios start at 1.0, got {custom_ratio}')

    redaction = settings.get(f'{PREFIX}REDACTION_COLOR', '').strip()
    if not redaction:
        redaction_color: int | None = COLOR_SECURE_WINDOW_CENSOR
    elif redaction.lower() == 'none':
        redaction_color = None
    else:
        try:
            redaction_color = parse_color(redaction)
        except ValueError as e:
            raise ConfigError(f'{PREFIX}REDACTION_COLOR: {e}') from None

    return CheckParameters(
        custom_contrast_ratio=custom_ratio,
        save_view_images=_bool(settings, f'{PREFIX}SAVE_VIEW_IMAGES'),
        enhanced_contrast_evaluation=_bool(settings, f'{PREFIX}ENHANCED_EVALUATION'),
        redaction_color=redaction_color,
    )


def load_parameters(env_file: str | None = None, environ: Mapping[str, str] | None = None) -> CheckParameters:
    return parameters_from_settings(read_settings(env_file, environ))
