"""contrast-tool: text contrast checking for UI screenshots.

Usage: uv run contrast-tool <technique> <tmp_dir> <image> [options]

Techniques are auto-discovered from contrast_checker/techniques/.
Each technique module's docstring is its documentation.
Run `contrast-tool help <technique>` for full module docs.

Configuration:
  CONTRAST_* settings are read from the OS environment first, then from a
  .env file found by walking up from the current directory (stopping at the
  nearest .git boundary). Use --env-file to point at a .env file explicitly.
  Command-line flags override both.
"""

import argparse
import dataclasses
import importlib
import json
import os
import sys

import structlog
from PIL import Image

from contrast_checker import registry
from contrast_checker.core.config import ConfigError, parameters_from_settings, read_settings
from contrast_checker.core.hierarchy import HierarchyError, load_hierarchy
from contrast_checker.core.log import configure_logging
from contrast_checker.core.report import format_json, format_text
from contrast_checker.core.types import CaptureContext, Report, ResultType

logger = structlog.get_logger()


def _load_technique_module(name: str) -> object:
    """Load the raw module for a technique (for docstring access)."""
    return importlib.import_module(f'contrast_checker.techniques.{name}')


def _short_help(name: str, fallback: str) -> str:
    doc = (_load_technique_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _build_parser() -> argparse.ArgumentParser:
    techniques = registry.all_techniques()

    epilog = (
        'Examples:\n'
        '  contrast-tool contrast ./tmp screenshot.png --hierarchy tree.json\n'
        '  contrast-tool contrast ./tmp screenshot.png -H tree.json --json --fail-on-error\n'
        '  contrast-tool contrast ./tmp screenshot.png -H tree.json --custom-ratio 7 --save-view-images\n'
        '  contrast-tool swatch ./tmp screenshot.png -H tree.json --enhanced\n'
        '  contrast-tool help contrast\n'
        '\n'
        'Settings (env or .env, overridden by flags):\n'
        '  CONTRAST_CUSTOM_RATIO, CONTRAST_SAVE_VIEW_IMAGES, CONTRAST_ENHANCED_EVALUATION,\n'
        '  CONTRAST_REDACTION_COLOR (#rrggbb or none), CONTRAST_LOG_LEVEL\n'
    )
    parser = argparse.ArgumentParser(
        prog='contrast-tool',
        description='Text contrast checking for UI screenshots.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('--log-level', default=None, help='DEBUG, INFO, WARNING or ERROR (default: WARNING)')
    sub = parser.add_subparsers(dest='technique', help='Technique to run')

    for name, tech in sorted(techniques.items()):
        p = sub.add_parser(name, help=_short_help(name, tech.help))
        p.add_argument('tmp_dir', help='Working directory for artefacts')
        p.add_argument('image', help='Path to screenshot PNG/JPG')
        p.add_argument('-H', '--hierarchy', help='Path to element hierarchy JSON')
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
        p.add_argument('-c', '--custom-ratio', type=float, default=None, metavar='R', help='Required contrast ratio')
        p.add_argument(
            '-s',
            '--save-view-images',
            action='store_true',
            default=None,
            help='Save cropped evidence images of heuristic warnings to tmp_dir',
        )
        p.add_argument(
            '-e',
            '--enhanced',
            action='store_true',
            default=None,
            help='Report every foreground colour candidate, not only the strongest',
        )
        p.add_argument('--fail-on-error', action='store_true', help='Exit 1 if any error result (CI gating)')

    help_parser = sub.add_parser('help', help='Print full docs for a technique')
    help_parser.add_argument('command', nargs='?', help='Technique name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a technique."""
    techniques = registry.all_techniques()

    if command is None:
        print('Available techniques:\n')
        for name, tech in sorted(techniques.items()):
            print(f'  {name:<14} {_short_help(name, tech.help)}')
        print('\nRun: contrast-tool help <technique> for full docs.')
        return

    if command not in techniques:
        print(f'Unknown technique: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(techniques))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_technique_module(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def _resolve_parameters(args: argparse.Namespace, settings: dict[str, str]):
    """Parameters from settings, with command-line flags applied on top."""
    parameters = parameters_from_settings(settings)
    overrides = {}
    if args.custom_ratio is not None:
        overrides['custom_contrast_ratio'] = args.custom_ratio
    if args.save_view_images is not None:
        overrides['save_view_images'] = args.save_view_images
    if args.enhanced is not None:
        overrides['enhanced_contrast_evaluation'] = args.enhanced
    return dataclasses.replace(parameters, **overrides)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    settings = read_settings(env_file=args.env_file)
    try:
        configure_logging(args.log_level or settings.get('CONTRAST_LOG_LEVEL', 'WARNING'))
    except ValueError as e:
        print(f'Error: {e}', file=sys.stderr)
        sys.exit(1)

    if not args.technique:
        parser.print_help()
        sys.exit(1)

    if args.technique == 'help':
        _print_help(getattr(args, 'command', None))
        return

    try:
        args.parameters = _resolve_parameters(args, settings)
    except ConfigError as e:
        print(f'Error: {e}', file=sys.stderr)
        sys.exit(1)

    if not os.path.isfile(args.image):
        print(f'Error: image not found: {args.image}', file=sys.stderr)
        sys.exit(1)
    image = Image.open(args.image).convert('RGB')

    hierarchy = None
    if args.hierarchy:
        try:
            hierarchy = load_hierarchy(args.hierarchy)
        except FileNotFoundError:
            print(f'Error: hierarchy not found: {args.hierarchy}', file=sys.stderr)
            sys.exit(1)
        except (HierarchyError, json.JSONDecodeError) as e:
            print(f'Error: invalid hierarchy {args.hierarchy}: {e}', file=sys.stderr)
            sys.exit(1)

    report = Report(
        image_path=args.image,
        image_width=image.width,
        image_height=image.height,
        hierarchy_path=args.hierarchy,
    )
    logger.info('technique_start', technique=args.technique, image=args.image)

    tech = registry.get(args.technique)
    if tech.requires_hierarchy and hierarchy is None:
        print(f'Error: {tech.name} requires --hierarchy', file=sys.stderr)
        sys.exit(1)
    tech.execute(CaptureContext(image=image, hierarchy=hierarchy), report, args)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))

    # CI gate, after output so the report is visible even on failure
    if args.fail_on_error and report.count(ResultType.ERROR) > 0:
        print(f'\nFAIL: {report.count(ResultType.ERROR)} text contrast error(s)', file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
