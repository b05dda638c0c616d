"""Market feed commands for QuantPilot CLI."""

import asyncio
from typing import Optional

import click
from rich.console import Group
from rich.live import Live
from rich.table import Table

from quantpilot.cli.common import build_app, console, load_settings_or_exit
from quantpilot.cli.render import candle_table


@click.command()
def assets() -> None:
    """List the instruments available to the simulated feed."""
    from quantpilot.market.assets import list_assets

    table = Table(title="Market Movers", show_header=True, header_style="bold cyan")
    table.add_column("", justify="center")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Type", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Change", justify="right")

    for asset in list_assets():
        color = "green" if asset.change >= 0 else "red"
        table.add_row(
            asset.icon or "",
            asset.symbol,
            asset.name,
            asset.type,
            f"${asset.price:,.2f}",
            f"[{color}]{asset.change:+.2f}%[/{color}]",
        )

    console.print(table)


def _feed_view(app, rows: int):
    snapshot = app.snapshot()
    name = snapshot.instrument.name if snapshot.instrument else "Default feed"
    color = "green" if snapshot.price_change >= 0 else "red"
    header = (
        f"[bold]{name}[/bold]  "
        f"[{color}]${snapshot.current_price:,.2f} ({snapshot.price_change:+.2f})[/{color}]  "
        "[dim](Ctrl+C to stop)[/dim]"
    )
    return Group(header, candle_table(snapshot.history, rows=rows))


async def _watch(app, ticks: int, rows: int) -> None:
    with Live(_feed_view(app, rows), console=console, refresh_per_second=4) as live:
        async with app:
            seen = 0
            while ticks == 0 or seen < ticks:
                await asyncio.sleep(app.market.tick_interval)
                live.update(_feed_view(app, rows))
                seen += 1


@click.command()
@click.argument("symbol", required=False)
@click.option("--ticks", type=int, default=0, help="Stop after N ticks (0 runs until Ctrl+C).")
@click.option("--rows", type=int, default=15, help="Candles to display.")
@click.pass_context
def watch(ctx: click.Context, symbol: Optional[str], ticks: int, rows: int) -> None:
    """Watch the live simulated feed for SYMBOL.

    \b
    Examples:
      quantpilot watch
      quantpilot watch BTC
      quantpilot watch RELIANCE --ticks 20
    """
    settings = load_settings_or_exit(ctx)
    app = build_app(settings, {}, symbol=symbol)

    try:
        asyncio.run(_watch(app, ticks, rows))
    except KeyboardInterrupt:
        console.print("[dim]Feed stopped.[/dim]")
