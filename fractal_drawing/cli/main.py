"""
Command-line interface for fractal generation.

Renders a generalized Mandelbrot set with the given view, iteration and
coloring parameters, optionally on parallel tiles, then previews and saves
the image.
"""

import click
import sys
import json
from pathlib import Path
from typing import Any, Dict
import logging
import time

from .. import __version__
from ..api import FractalRenderer
from ..io.config import load_parameters

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


class IterationCount(click.ParamType):
    """Non-negative integer in decimal, 0x hex, 0b binary or leading-zero octal."""

    name = 'iterations'

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value

        text = str(value).strip().lower()
        if text.startswith('-'):
            self.fail(f"Iterations cannot be set to a negative value: {value}", param, ctx)

        try:
            if text.startswith('0x'):
                return int(text[2:], 16)
            if text.startswith('0b'):
                return int(text[2:], 2)
            if text.startswith('0') and len(text) > 1:
                return int(text[1:], 8)
            return int(text, 10)
        except ValueError:
            self.fail(f"Invalid iteration count: {value}", param, ctx)


def format_duration(nanoseconds: int) -> str:
    """Format an elapsed time as '1 days 2hr 3min 4sec 5ms 6µs 7ns', omitting zero parts."""
    days = nanoseconds // (10**9 * 60 * 60 * 24)
    hours = nanoseconds // (10**9 * 60 * 60) % 24
    minutes = nanoseconds // (10**9 * 60) % 60
    seconds = nanoseconds // 10**9 % 60
    milliseconds = nanoseconds // 10**6 % 1000
    microseconds = nanoseconds // 1000 % 1000
    remainder = nanoseconds % 1000

    parts = []
    if days:
        parts.append(f"{days} days")
    if hours:
        parts.append(f"{hours}hr")
    if minutes:
        parts.append(f"{minutes}min")
    if seconds:
        parts.append(f"{seconds}sec")
    if milliseconds:
        parts.append(f"{milliseconds}ms")
    if microseconds:
        parts.append(f"{microseconds}µs")
    if remainder:
        parts.append(f"{remainder}ns")
    return ' '.join(parts)


def _overrides(kwargs: Dict[str, Any]) -> Dict[str, Any]:
    """Map command-line option names to parameter names."""
    names = {
        'x': 'x',
        'y': 'y',
        'zoom': 'zoom_magnitude',
        'exponent': 'exponent',
        'bailout': 'bailout',
        'color_factor': 'color_factor',
        'color_offset': 'color_offset',
        'iterations': 'max_iterations',
        'resolution': 'resolution',
        'workers': 'workers',
    }
    overrides = {names[k]: v for k, v in kwargs.items() if k in names and v is not None}
    if kwargs.get('threaded'):
        overrides['parallel'] = True
    return overrides


def _parameter_options(func):
    """Options shared by every command that builds render parameters."""
    options = [
        click.option('-x', 'x', type=float, help='Center x-coordinate of the output [default: -0.75]'),
        click.option('-y', 'y', type=float, help='Center y-coordinate of the output [default: 0.0]'),
        click.option('-z', '--zoom', type=float,
                     help='Zoom magnitude; the actual zoom level is 2^zoom [default: 0.0]'),
        click.option('-e', '--exponent', type=float,
                     help='Exponent of the iteration z -> z^e + c; not 0 or 1 [default: 2.0]'),
        click.option('-b', '--bailout', type=float,
                     help='Bailout radius, greater than 1 [default: 2.0]'),
        click.option('--cm', '--color-factor', 'color_factor', type=float,
                     help='Color scale factor, > 1 for more variation [default: 1.0]'),
        click.option('--ca', '--color-offset', 'color_offset', type=float,
                     help='Hue shift in the range 0 <= x < 1 [default: 0.0]'),
        click.option('-i', '--iterations', type=IterationCount(),
                     help='Maximum iterations per pixel; 0 derives it from the zoom'),
        click.option('-r', '--resolution', type=int,
                     help='Resolution multiplier; 1 gives 1920x1080 [default: 1]'),
        click.option('-t', '--threaded', is_flag=True, default=False,
                     help='Render on parallel tiles'),
        click.option('-w', '--workers', type=int,
                     help='Worker count and tiles per side for parallel rendering'),
        click.option('--config', type=click.Path(exists=True, dir_okay=False),
                     help='JSON configuration file'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, verbose, quiet):
    """
    Fractal Drawing - generalized Mandelbrot set renderer.

    Renders z -> z^e + c escape-time images with smooth hue coloring.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"Fractal Drawing v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            ctx.exit(0)
    elif ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@main.command()
@_parameter_options
@click.option('-o', '--output', type=click.Path(exists=True, file_okay=False),
              default=str(Path.home()), show_default=True,
              help='Existing directory to write the image to')
@click.option('--backend', type=click.Choice(['process', 'thread']), default='process',
              show_default=True, help='Worker pool used with --threaded')
@click.option('--preview/--no-preview', default=False, help='Show the finished image')
@click.option('--save/--no-save', default=True, help='Write the image to the output directory')
@click.pass_context
def render(ctx, output, backend, preview, save, config, **kwargs):
    """Render a single fractal image."""
    start_time = time.perf_counter_ns()
    ctx.ensure_object(dict)

    try:
        params = load_parameters(config, _overrides(kwargs))
        renderer = FractalRenderer(params, use_processes=(backend == 'process'))

        click.echo(f"Rendering {params.width}x{params.height} image...")
        image = renderer.render()

        if preview:
            renderer.preview(image)

        if save:
            path = renderer.save(image, Path(output))
            click.echo(f"Saved: {path}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        if ctx.obj.get('verbose'):
            import traceback
            traceback.print_exc()
        sys.exit(1)

    click.echo(f"Total Time:   {format_duration(time.perf_counter_ns() - start_time)}")


@main.command('show-config')
@_parameter_options
@click.pass_context
def show_config(ctx, config, **kwargs):
    """Print the effective render parameters as JSON."""
    try:
        params = load_parameters(config, _overrides(kwargs))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    info = params.to_dict()
    info.update({
        'width': params.width,
        'height': params.height,
        'iteration_limit': params.iteration_limit,
        'bounds': list(params.bounds),
    })
    click.echo(json.dumps(info, indent=2))


if __name__ == '__main__':
    main()
