"""Wallet command for QuantPilot CLI."""

import click

from quantpilot.cli.common import bot_config_options, build_app, console, load_settings_or_exit
from quantpilot.cli.render import allocation_panel


@click.command()
@bot_config_options
@click.pass_context
def wallet(ctx: click.Context, overrides: dict) -> None:
    """Show how capital is split between the vault and trading.

    \b
    Examples:
      quantpilot wallet
      quantpilot wallet --vault-reserve 60
      quantpilot wallet --no-vault
    """
    settings = load_settings_or_exit(ctx)
    app = build_app(settings, overrides)
    console.print(allocation_panel(app.allocation(), app.config))
