"""
Sliced optimal-transport color transfer from the command line.
"""

import argparse
import math
import sys
from pathlib import Path

import numpy as np

# Rich imports
from rich.panel import Panel
from rich.tree import Tree
from rich.table import Table
from rich.markup import escape
from rich import box

from .color_transfer import ColorTransfer, clamp_step_factor
from .coupling import SORTERS
from .image_io import ColorMorphError, ImageSaveError, load_image_pair, save_image
from .utils import console, MemoryTracker, RichProgressReporter, VerboseReporter, format_file_size


def non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def finite_float(value):
    number = float(value)
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"must be a finite number, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(
        prog='colormorph',
        description='Color Transfer - Match the color distribution of an image to a target image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Match photo.jpg to the colors of sunset.png
  colormorph photo.jpg out.png --target sunset.png

  # Recolor with a fixed palette image, without inventing new colors when resizing it
  colormorph photo.jpg out.png --target palette.png --palette

  # Reproducible run with per-iteration diagnostics and saved frames
  colormorph photo.jpg out.png --target sunset.png --seed 7 --verbose --frames-dir frames
        """
    )

    parser.add_argument('source', help='Source image path')
    parser.add_argument('destination', help='Output image path')
    parser.add_argument('-t', '--target', required=True,
                        help='Image whose color distribution is matched')
    parser.add_argument('-n', '--num-iters', type=non_negative_int, default=100,
                        help='Number of outer iterations (default: 100)')
    parser.add_argument('-r', '--step-factor', type=finite_float, default=1.0,
                        help='Initial step factor, clamped to [0.01, 10] (default: 1.0)')
    parser.add_argument('-b', '--batch-size', type=positive_int, default=16,
                        help='Random directions per iteration (default: 16)')
    parser.add_argument('-p', '--palette', action='store_true',
                        help='Resize the target with nearest-neighbour sampling (for palette images)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Print per-iteration diagnostics instead of a progress bar')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible runs')
    parser.add_argument('--sorter', choices=sorted(SORTERS), default='parallel',
                        help='''Sort used for the 1-D coupling (default: parallel)
  parallel - chunked merge sort on the numba thread pool
  stable   - single threaded numpy argsort''')
    parser.add_argument('--frames-dir', default=None,
                        help='Save the image after every iteration into this directory')
    parser.add_argument('--track-memory', action='store_true',
                        help='Print peak memory usage after the run')
    return parser


def frame_writer(frames_dir: Path, destination: Path):
    """Return an on_iteration callback that saves numbered frames."""
    try:
        frames_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ImageSaveError(f"Could not create frames directory {frames_dir}: {e}") from e
    suffix = destination.suffix or '.png'

    def write(iteration, image):
        save_image(image, str(frames_dir / f"{destination.stem}_{iteration:03d}{suffix}"))

    return write


def print_configuration(args):
    config_table = Table(title="Configuration", box=box.ROUNDED, show_header=True, header_style="bold #FF8C00")
    config_table.add_column("Parameter", style="#FF8C00", no_wrap=True, min_width=20)
    config_table.add_column("Value", style="white", min_width=12)

    config_table.add_row("Iterations", f"[bold]{args.num_iters}[/bold]")
    config_table.add_row("Batch Size", f"[bold]{args.batch_size}[/bold]")
    config_table.add_row("Step Factor", f"[bold]{clamp_step_factor(args.step_factor)}[/bold]")
    config_table.add_row("Sorter", f"[bold]{args.sorter}[/bold]")
    config_table.add_row("Seed", f"[bold]{args.seed}[/bold]" if args.seed is not None else "[dim]random[/dim]")
    config_table.add_row("Palette Mode", "[green]Enabled[/green]" if args.palette else "[dim]Disabled[/dim]")
    config_table.add_row("Frames", str(args.frames_dir) if args.frames_dir else "[dim]Disabled[/dim]")

    console.print(config_table)
    console.print()


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    destination = Path(args.destination)

    console.print()
    console.rule("[bold #FF8C00]Loading images", style="#FF8C00")
    console.print()

    try:
        source, target = load_image_pair(args.source, args.target, palette=args.palette,
                                         console=console if args.verbose else None)
    except ColorMorphError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, soft_wrap=True)
        sys.exit(1)

    console.rule("[bold #FF8C00]Matching colors", style="#FF8C00")
    console.print()
    print_configuration(args)

    transfer = ColorTransfer(
        source,
        target,
        step_factor=args.step_factor,
        batch_size=args.batch_size,
        rng=np.random.default_rng(args.seed),
        sorter=SORTERS[args.sorter]
    )

    try:
        on_iteration = None
        if args.frames_dir:
            on_iteration = frame_writer(Path(args.frames_dir), destination)

        with MemoryTracker("Color transfer", enabled=args.track_memory):
            if args.verbose:
                reporter = VerboseReporter(console)
            else:
                reporter = RichProgressReporter(args.num_iters, console)
            result = transfer.run(args.num_iters, reporter=reporter, on_iteration=on_iteration)

        save_image(result, str(destination))
    except ColorMorphError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, soft_wrap=True)
        sys.exit(1)

    console.print(f"[green]✓ Color transfer complete[/green] ({args.num_iters} iterations)", highlight=False)
    console.print()

    tree = Tree(f"[bold #FF8C00]{destination.absolute().parent}[/bold #FF8C00]")
    tree.add(f"[bold]{destination.name}[/bold] [dim]({format_file_size(destination)})[/dim]")
    if args.frames_dir:
        tree.add(f"{Path(args.frames_dir).name}/ [dim]({args.num_iters} frames)[/dim]")

    panel = Panel(
        tree,
        title="[bold #FF8C00]Outputs saved[/bold #FF8C00]",
        border_style="#FF8C00",
        box=box.ROUNDED
    )
    console.print(panel)


if __name__ == '__main__':
    main()
