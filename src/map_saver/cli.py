"""
Command-line interface for map-saver.

Commands:
- save: Capture the map from an open Roll20 game and write a PNG
- grid: Show the tile grid a capture would use (no browser needed)
- browser-help: Show how to start Chrome so map-saver can attach to it
"""

import click
from pathlib import Path
from pyppeteer.errors import PyppeteerError, TimeoutError as PyppeteerTimeoutError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .api import plan_grid, save_map
from .config import ZOOM_LEVELS

console = Console()


@click.group()
def main():
    """Map Saver - Capture a whole Roll20 map as one image."""
    pass


@main.command()
@click.option('-o', '--output', type=click.Path(path_type=Path), default=Path('map.png'),
              show_default=True, help='Output PNG path')
@click.option('-z', '--zoom', type=float, default=100, show_default=True,
              help=f'Zoom percentage, snapped up to one of {", ".join(map(str, ZOOM_LEVELS))}')
@click.option('--browser-url', default='http://127.0.0.1:9222', show_default=True,
              help='DevTools address of a running Chrome')
@click.option('--launch', is_flag=True, help='Launch a new browser instead of attaching')
@click.option('--headless', is_flag=True, help='Launch the browser headless (with --launch)')
@click.option('--executable', 'executable_path', type=click.Path(path_type=str),
              help='Browser executable (with --launch)')
@click.option('--url', help='Roll20 game URL to open if no game tab is open')
@click.option('--retries', type=int, default=10, show_default=True,
              help='Render attempts per tile before accepting it as-is')
@click.option('--ui-timeout', type=float, default=2.0, show_default=True,
              help='Seconds to wait for the zoom control to respond')
@click.option('--cell-size', type=int, default=70, show_default=True, help='Pixels per grid cell at 100%')
@click.option('--thumbnail', is_flag=True, help='Also show the result as a thumbnail in the page')
def save(output: Path, zoom: float, browser_url: str, launch: bool, headless: bool,
         executable_path: str | None, url: str | None, retries: int, ui_timeout: float,
         cell_size: int, thumbnail: bool):
    """Capture the map from an open Roll20 game.

    \b
    The game must be open in a Chrome started with remote debugging
    (see `map-saver browser-help`), or use --launch and log in.
    """
    console.print("[bold]Saving Roll20 map[/]")
    console.print(f"  Output: {output}")
    console.print(f"  Zoom: {zoom:g}%")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("({task.completed}/{task.total})"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Capturing tiles...", total=None)

        def update_progress(completed, total, percent):
            progress.update(task, completed=completed, total=total)

        try:
            result = save_map(
                browser_url=browser_url,
                launch=launch,
                headless=headless,
                executable_path=executable_path,
                url=url,
                output_path=output,
                zoom=zoom,
                thumbnail=thumbnail,
                progress_callback=update_progress,
                frame_retries=retries,
                ui_wait_timeout=ui_timeout,
                grid_cell_size=cell_size,
            )
        except (LookupError, OSError, PyppeteerError, PyppeteerTimeoutError) as e:
            console.print(f"[red]✗ Could not reach the Roll20 game: {e}[/]")
            console.print("  Run [cyan]map-saver browser-help[/] for setup instructions.")
            raise click.Abort()

    console.print()
    for warning in result.warnings:
        console.print(f"  [yellow]⚠ {warning}[/]")

    if not result.success:
        console.print(f"[red]✗ Failed to save map: {result.error}[/]")
        raise click.Abort()

    console.print(f"[bold green]✓ Map saved:[/] {output}")
    console.print(f"  Size: {result.width}x{result.height}px at {result.zoom}%")
    console.print(f"  Tiles: {result.accepted_count}/{result.tile_count} clean")
    if result.exhausted_count:
        console.print(f"  [yellow]⚠ {result.exhausted_count} tiles may have rendering artifacts[/]")


@main.command()
@click.argument('cells_wide', type=float)
@click.argument('cells_high', type=float)
@click.option('-z', '--zoom', type=float, default=100, show_default=True, help='Zoom percentage')
@click.option('--viewport', nargs=2, type=int, default=(1280, 800), show_default=True,
              help='Canvas width and height in pixels')
@click.option('--cell-size', type=int, default=70, show_default=True, help='Pixels per grid cell at 100%')
@click.option('-v', '--verbose', is_flag=True, help='List every tile origin')
def grid(cells_wide: float, cells_high: float, zoom: float, viewport: tuple[int, int],
         cell_size: int, verbose: bool):
    """Show the tile grid for a map CELLS_WIDE x CELLS_HIGH grid cells big."""
    try:
        plan = plan_grid(cells_wide, cells_high, viewport, zoom=zoom, cell_size=cell_size)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/]")
        raise click.Abort()

    table = Table(title="Capture Plan")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Zoom", f"{plan.zoom}% (redraw via {plan.redraw_zoom}%)")
    table.add_row("Image size", f"{plan.width}x{plan.height}px")
    table.add_row("Tile size", f"{plan.tile_width}x{plan.tile_height}px")
    table.add_row("Grid", f"{plan.columns} columns x {plan.rows} rows")
    table.add_row("Tiles", str(plan.tile_count))
    console.print(table)

    if verbose and plan.origins:
        origins = Table(title="Tile Origins (capture order)")
        origins.add_column("#", justify="right")
        origins.add_column("Row", justify="right")
        origins.add_column("Column", justify="right")
        origins.add_column("Origin")
        for origin in plan.origins:
            origins.add_row(str(origin.index), str(origin.row), str(origin.column), f"({origin.ox}, {origin.oy})")
        console.print(origins)


@main.command('browser-help')
def browser_help():
    """Show how to start Chrome so map-saver can attach to it."""
    console.print()
    console.print("[bold cyan]Preparing Chrome for map-saver[/]")
    console.print("=" * 60)
    console.print()
    console.print("Roll20 needs a logged-in session, so map-saver attaches to a")
    console.print("browser you are already using through the DevTools protocol.")
    console.print()
    console.print("[bold]Step 1:[/] Quit Chrome, then start it with remote debugging:")
    console.print()
    console.print("  [cyan]google-chrome --remote-debugging-port=9222[/]")
    console.print("  [dim]macOS: /Applications/Google\\ Chrome.app/Contents/MacOS/Google\\ Chrome --remote-debugging-port=9222[/]")
    console.print()
    console.print("[bold]Step 2:[/] Log in to Roll20 and open your game")
    console.print()
    console.print("[bold]Step 3:[/] Make sure the zoom control is visible")
    console.print()
    console.print("[bold]Step 4:[/] Run:")
    console.print()
    console.print("  [cyan]map-saver save -o map.png --zoom 150[/]")
    console.print()
    console.print("[bold]Troubleshooting:[/]")
    console.print("  • 'Required page elements not found': the game tab is not fully loaded.")
    console.print("  • Tiles with artifacts: raise --retries, or capture at a lower zoom.")
    console.print("  • Very large maps at high zoom may be too big to encode.")
    console.print()


if __name__ == '__main__':
    main()
