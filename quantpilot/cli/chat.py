"""Chat command for QuantPilot CLI.

Interactive session with Captain Quant while the simulated feed runs
in the background.
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
from quantpilot.cli.render import message_panel, signal_panel

QUIT_COMMANDS = {"/quit", "/exit", "/q"}

HELP_TEXT = (
    "[dim]Commands: [cyan]/scan[/cyan] run the AI analyst, "
    "[cyan]/price[/cyan] current price, [cyan]/reset[/cyan] clear the chat, "
    "[cyan]/quit[/cyan] leave.[/dim]"
)


async def _chat_loop(app) -> None:
    console.print(message_panel(app.pilot.transcript[0]))
    console.print(HELP_TEXT)

    async with app:
        while True:
            text = await asyncio.to_thread(console.input, "[bold]You[/bold] > ")
            command = text.strip().lower()

            if command in QUIT_COMMANDS:
                return
            if command == "/scan":
                with console.status("[dim]Scanning market...[/dim]"):
                    signal = await app.analyze()
                console.print(signal_panel(signal))
                continue
            if command == "/price":
                console.print(f"[cyan]${app.market.current_price:,.2f}[/cyan]")
                continue
            if command == "/reset":
                app.pilot.reset()
                console.print(message_panel(app.pilot.transcript[0]))
                continue
            if not command:
                continue

            with console.status("[dim]Captain Quant is typing...[/dim]"):
                transcript = await app.send_chat(text)
            console.print(message_panel(transcript[-1]))


async def _single_turn(app, message: str):
    async with app:
        with console.status("[dim]Captain Quant is typing...[/dim]"):
            return await app.send_chat(message)


@click.command()
@click.argument("symbol", required=False)
@click.option("-m", "--message", default=None, help="Send one message and exit.")
@bot_config_options
@click.pass_context
def chat(ctx: click.Context, symbol: Optional[str], message: Optional[str], overrides: dict) -> None:
    """Chat with Captain Quant, your autonomous trading pilot.

    The pilot sees the live price of SYMBOL, your bot configuration and
    the last AI signal.

    \b
    Examples:
      quantpilot chat
      quantpilot chat BTC
      quantpilot chat ETH -m "Is my vault safe?"
    """
    settings = load_settings_or_exit(ctx)
    require_api_key(settings)
    app = build_app(settings, overrides, symbol=symbol)

    try:
        if message is not None:
            transcript = asyncio.run(_single_turn(app, message))
            console.print(message_panel(transcript[-1]))
        else:
            asyncio.run(_chat_loop(app))
    except (KeyboardInterrupt, EOFError):
        pass

    console.print("[dim]Captain Quant signing off.[/dim]")
