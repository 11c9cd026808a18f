import os
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import math
import shutil
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter

import numpy as np

# Imports for visualization
import imageio

from complexgraph import (
    Area,
    ExpressionError,
    Function,
    OrderKey,
    Raster,
    RenderParameters,
    parse_function,
    render_function,
)
from complexgraph.plot import (
    Box,
    Plot,
    choose_tick_step,
    draw_axes,
    draw_function_name,
    format_tick,
    new_plot,
    paste_raster,
    series_tick_step,
)

Renderer = Callable[[Function, Area, RenderParameters], Raster]

VERBS = ("func", "pows", "exps", "examples")

FUNCTION_REFERENCE = """\
The description of the drawing function.
You can use the following operations: +, -, *, /, ^, exp, ln, sin, cos, tan.
Term 'z' is used for marking an argument.

Complex constants can be written as <real> or <imaginary>i or
{<real>,<imaginary>i}. E.g.: 1, 2i, {3,0.5i}.

Unary operations have more priority. For example ln z^2 actually means
(ln z)^2. To change priority use parentheses, e.g. ln (z^2).

If the description starts with a minus (e.g. '-ln z'), place it after '--',
e.g. -- '-ln z'.

Examples of function descriptions:
    2 * (sin exp z^3 / tan ln z^z)
    (sin z)^2i + cos(z * {3,0.1i} + z*z)
"""


def select_device() -> str:
    """Place tensor computations on the first GPU TensorFlow can see."""

    import tensorflow as tf

    if _suppress_messages:
        try:
            tf.get_logger().setLevel("ERROR")
            for handler in tf.get_logger().handlers:
                handler.setLevel("ERROR")
        except Exception:
            pass

    log("TensorFlow version: %s" % tf.__version__)
    gpus = tf.config.list_physical_devices('GPU')
    if gpus:
        try:
            for gpu in gpus:
                tf.config.experimental.set_memory_growth(gpu, True)
            log("GPU found, using %s" % gpus[0].name)
            return '/GPU:0'
        except RuntimeError as e:
            if VERBOSE:
                print(e)
            return '/CPU:0'
    log("No GPU found, using CPU")
    return '/CPU:0'


def build_renderer(backend: str) -> Renderer:
    if backend == "threads":
        return render_function

    from complexgraph.tensor import render_function_tensor

    device = select_device()

    def render(func: Function, area: Area, params: RenderParameters) -> Raster:
        return render_function_tensor(func, area, params, device=device)

    return render


def _add_common_options(parser: ArgumentParser) -> None:
    parser.add_argument('-w', '--width', type=int, dest='width', default=1000,
                        help='the width of the preimage in the resulting plot picture', metavar='WIDTH')
    parser.add_argument('-H', '--height', type=int, dest='height', default=1000,
                        help='the height of the preimage in the resulting plot picture', metavar='HEIGHT')
    parser.add_argument('-q', '--quality', type=int, dest='quality', default=None,
                        help='quality of drawing in count of dots along an axis in preimage. '
                             'Defaults to the plot width and height.', metavar='QUALITY')
    parser.add_argument('--order', choices=[key.value for key in OrderKey], default=OrderKey.REAL.value,
                        help='which part of a preimage point decides overlapping dots: the largest value wins')
    parser.add_argument('--backend', choices=['threads', 'tensor'], default='threads',
                        help='"threads" renders rows on a thread pool, "tensor" resolves overlaps with TensorFlow')
    parser.add_argument('--workers', type=int, default=None,
                        help='number of rendering threads (default: CPU count)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')


def _add_series_options(parser: ArgumentParser, directory: str) -> None:
    parser.add_argument('-d', '--directory', type=str, dest='directory', default=directory,
                        help='results directory name', metavar='DIRECTORY')
    parser.add_argument('--gif', type=str, dest='gif', default=None,
                        help='also collect the series into an animated GIF at this path', metavar='GIF')
    parser.add_argument('--frame-duration', type=float, dest='frame_duration', default=0.2,
                        help='seconds each frame is shown in the GIF')


def build_parser():
    parser = ArgumentParser(description='Draws complex-valued functions with domain coloring.')
    subparsers = parser.add_subparsers(dest='verb')

    func = subparsers.add_parser('func', help='Draws a complex-valued function',
                                 description=FUNCTION_REFERENCE, formatter_class=RawDescriptionHelpFormatter)
    func.add_argument('description', help='the description of the drawing function (see above)')
    func.add_argument('-l', '--left', type=float, default=-1.0,
                      help='coordinate of the left side of preimage area (min Re z)')
    func.add_argument('-r', '--right', type=float, default=1.0,
                      help='coordinate of the right side of preimage area (max Re z)')
    func.add_argument('-b', '--bottom', type=float, default=-1.0,
                      help='coordinate of the bottom side of preimage area (min Im z)')
    func.add_argument('-t', '--top', type=float, default=1.0,
                      help='coordinate of the top side of preimage area (max Im z)')
    func.add_argument('--tick-step', type=float, dest='tick_step', default=None,
                      help='tick step along axes. If not specified, then it is chosen automatically')
    func.add_argument('-f', '--file-name', type=str, dest='file_name', default='plot.png',
                      help='the name of the creating plot file')
    _add_common_options(func)

    pows = subparsers.add_parser('pows', help='Draws series of power function')
    pows.add_argument('-o', '--origin', type=float, default=2.0, help='starting power')
    pows.add_argument('-s', '--step', type=float, default=-0.1, help='power changing step')
    pows.add_argument('-c', '--count', type=int, default=30, help='series count')
    pows.add_argument('-a', '--area-size', type=float, dest='area_size', default=6.0,
                      help='width and height of the centered squared area')
    pows.add_argument('-t', '--ticks-step', type=float, dest='tick_step', default=1.0,
                      help='ticks step for both axes')
    _add_series_options(pows, 'pows')
    _add_common_options(pows)

    exps = subparsers.add_parser('exps', help='Draws series of exponent function on different scale')
    exps.add_argument('-o', '--origin', type=float, default=2 * math.pi,
                      help='starting squared centered area size')
    exps.add_argument('-s', '--step', type=float, default=-0.2, help='area size step')
    exps.add_argument('-c', '--count', type=int, default=30, help='series count')
    _add_series_options(exps, 'exps')
    _add_common_options(exps)

    examples = subparsers.add_parser('examples', help='Draws basic example functions')
    examples.add_argument('-a', '--area-size', type=float, dest='area_size', default=2 * math.pi,
                          help='width and height of the centered squared area')
    examples.add_argument('-t', '--ticks-step', type=float, dest='tick_step', default=1.0,
                          help='ticks step for both axes')
    examples.add_argument('-d', '--directory', type=str, dest='directory', default='examples',
                          help='results directory name')
    _add_common_options(examples)

    return parser


def render_parameters(opt: Namespace, quality: Optional[int] = None) -> RenderParameters:
    return RenderParameters(
        width=opt.width,
        height=opt.height,
        real_samples=quality,
        imag_samples=quality,
        order=OrderKey(opt.order),
        workers=opt.workers,
    )


def draw_panel(
    plot: Plot,
    box: Box,
    func: Function,
    area: Area,
    params: RenderParameters,
    tick_step: float,
    renderer: Renderer,
) -> None:
    """Render ``func`` into ``box`` and annotate it with axes and its name."""

    raster = renderer(func, area, params)
    paste_raster(plot.canvas, box, raster)
    draw_axes(plot.canvas, box, area, tick_step)
    draw_function_name(plot.canvas, box, func.display_name)


def draw_plot(func: Function, area: Area, opt: Namespace, tick_step: float, renderer: Renderer) -> Plot:
    """Draw the preimage (identity) panel next to the image of ``func``."""

    plot = new_plot(opt.width, opt.height)
    draw_panel(plot, plot.preimage, Function.identity(), area, render_parameters(opt), tick_step, renderer)
    draw_panel(plot, plot.image, func, area, render_parameters(opt, opt.quality), tick_step, renderer)
    return plot


def prepare_directory(directory: Path) -> Path:
    """Recreate ``directory`` empty."""

    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True)
    return directory


@dataclass
class SeriesWriter:
    """Write numbered plot files and, optionally, an animated GIF."""

    directory: Path
    prefix: str
    gif_path: Optional[Path] = None
    frame_duration: float = 0.2

    def __post_init__(self) -> None:
        prepare_directory(self.directory)
        self._gif_writer: Any = None
        if self.gif_path is not None:
            self.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(
                str(self.gif_path), mode='I', duration=self.frame_duration, loop=0
            )

    def write(self, index: int, plot: Plot) -> Path:
        path = self.directory / f"{self.prefix}{index}.png"
        plot.save(path)
        if self._gif_writer is not None:
            self._gif_writer.append_data(plot.to_array())
        return path

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None


def run_func(opt: Namespace, parser: ArgumentParser, renderer: Renderer) -> None:
    try:
        area = Area(complex(opt.left, opt.bottom), complex(opt.right, opt.top))
        func = parse_function(opt.description)
    except ExpressionError as exc:
        parser.error(f"invalid expression: {exc}")
    except ValueError as exc:
        parser.error(str(exc))

    tick_step = opt.tick_step if opt.tick_step is not None else choose_tick_step(area)
    log(f"Drawing {func.display_name} over [{area.left_bottom}, {area.right_top}], tick step {tick_step}")
    plot = draw_plot(func, area, opt, tick_step, renderer)
    plot.save(Path(opt.file_name))
    log(f"Saved {opt.file_name}")


def _gif_path(opt: Namespace) -> Optional[Path]:
    return Path(opt.gif).expanduser() if opt.gif else None


def run_pows(opt: Namespace, parser: ArgumentParser, renderer: Renderer) -> None:
    try:
        area = Area.square(opt.area_size)
    except ValueError as exc:
        parser.error(str(exc))

    identity = Function.identity()
    writer = SeriesWriter(Path(opt.directory), "pow", _gif_path(opt), opt.frame_duration)
    try:
        for i in range(opt.count):
            p = opt.origin + opt.step * i
            print(f"Drawing power [{i}]: {p}...")
            func = identity.right_compose(f"#^{format_tick(p)}", lambda z, p=p: np.power(z, p))
            writer.write(i, draw_plot(func, area, opt, opt.tick_step, renderer))
    finally:
        writer.close()


def run_exps(opt: Namespace, parser: ArgumentParser, renderer: Renderer) -> None:
    func = Function.identity().right_compose("exp(#)", np.exp)
    writer = SeriesWriter(Path(opt.directory), "exp", _gif_path(opt), opt.frame_duration)
    try:
        for i in range(opt.count):
            size = opt.origin + i * opt.step
            print(f"Drawing size [{i}]: {size}...")
            try:
                area = Area.square(size)
            except ValueError as exc:
                parser.error(f"series size {size} is not positive: {exc}")
            writer.write(i, draw_plot(func, area, opt, series_tick_step(size), renderer))
    finally:
        writer.close()


EXAMPLE_FUNCTIONS = (
    ("sqrt", "sqrt(#)", np.sqrt),
    ("exp", "exp(#)", np.exp),
    ("ln", "ln #", np.log),
    ("sin", "sin #", np.sin),
    ("cos", "cos #", np.cos),
    ("tan", "tan #", np.tan),
)


def run_examples(opt: Namespace, parser: ArgumentParser, renderer: Renderer) -> None:
    try:
        area = Area.square(opt.area_size)
    except ValueError as exc:
        parser.error(str(exc))

    directory = prepare_directory(Path(opt.directory))
    identity = Function.identity()
    for file_name, name, mapping in EXAMPLE_FUNCTIONS:
        print(f"Drawing {file_name}...")
        plot = draw_plot(identity.right_compose(name, mapping), area, opt, opt.tick_step, renderer)
        plot.save(directory / f"{file_name}.png")


RUNNERS = {
    "func": run_func,
    "pows": run_pows,
    "exps": run_exps,
    "examples": run_examples,
}


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def find_verb(argv: list[str]) -> Optional[int]:
    """Index of the verb in ``argv``, skipping leading options and their numeric values."""

    for i, arg in enumerate(argv):
        if arg == "--":
            return None
        if arg.startswith("-") or _is_number(arg):
            continue
        return i if arg in VERBS else None
    return None


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    position = find_verb(argv)
    if position is None:
        # 'func' is the default verb
        if not argv or argv[0] not in {"-h", "--help"}:
            argv.insert(0, "func")
    elif position > 0:
        argv.insert(0, argv.pop(position))

    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.quality is not None and opt.quality <= 0:
        parser.error("--quality must be positive.")
    if opt.workers is not None and opt.workers <= 0:
        parser.error("--workers must be positive.")

    renderer = build_renderer(opt.backend)
    RUNNERS[opt.verb](opt, parser, renderer)


if __name__ == '__main__':
    main()
