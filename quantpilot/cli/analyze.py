"""Analyze command for QuantPilot CLI.

Runs the simulated feed for an instrument and asks the analyst agent
for a trading signal on the current window.
"""

import asyncio
from typing import Optional

import click

from quantpilot.cli.common import (
    bot_config_options,
    build_app,
    console,
    load_settings_or_exit,
    require_api_key,
)
from quantpilot.cli.render import candle_table, signal_panel


async def _run_analysis(app, ticks: int):
    async with app:
        for _ in range(ticks):
            await asyncio.sleep(app.market.tick_interval)
        with console.status("[dim]Scanning market...[/dim]"):
            return await app.analyze()


@click.command()
@click.argument("symbol", required=False)
@click.option("--ticks", type=int, default=0, help="Let the feed run N ticks before scanning.")
@click.option("--rows", type=int, default=10, help="Candles to display.")
@bot_config_options
@click.pass_context
def analyze(ctx: click.Context, symbol: Optional[str], ticks: int, rows: int, overrides: dict) -> None:
    """Get an AI trading signal for SYMBOL.

    The analyst sees the last 20 simulated candles plus your bot
    configuration. If the service is unavailable a HOLD signal with
    zero confidence is shown.

    \b
    Examples:
      quantpilot analyze BTC
      quantpilot analyze NIFTY --market OPTIONS --strategy OPTIONS_IRON_CONDOR
      quantpilot analyze ETH --strict-no-loss --ticks 5
    """
    settings = load_settings_or_exit(ctx)
    require_api_key(settings)
    app = build_app(settings, overrides, symbol=symbol)

    signal = asyncio.run(_run_analysis(app, ticks))

    snapshot = app.snapshot()
    console.print(candle_table(snapshot.history, rows=rows))
    console.print(signal_panel(signal))
