"""Generate command for QuantPilot CLI.

Produces the trading system and backtest sources for the current bot
configuration.
"""

import asyncio
from pathlib import Path
from typing import Optional

import click

from quantpilot.cli.common import (
    bot_config_options,
    build_app,
    console,
    load_settings_or_exit,
    require_api_key,
)
from quantpilot.cli.render import artifact_panel


def write_artifacts(artifacts, out_dir: Path) -> list[Path]:
    """Write both generated files into ``out_dir``.

    Returns:
        Paths written, bot code first.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for artifact in (artifacts.bot_code, artifacts.backtest_code):
        path = out_dir / artifact.file_name
        path.write_text(artifact.content + "\n")
        written.append(path)
    return written


async def _generate(app):
    with console.status("[dim]Generating system architecture...[/dim]"):
        return await app.generate_code()


@click.command()
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write algo_engine.py and backtest_engine.py into.",
)
@click.option("--show/--no-show", default=True, help="Print the generated code.")
@bot_config_options
@click.pass_context
def generate(ctx: click.Context, out_dir: Optional[Path], show: bool, overrides: dict) -> None:
    """Generate Python source for your custom bot and its backtest.

    Both files are requested concurrently; if one fails the other is
    still shown.

    \b
    Examples:
      quantpilot generate
      quantpilot generate --market OPTIONS --strategy OPTIONS_WHEEL --out ./bot
      quantpilot generate --vault-reserve 90 --strict-no-loss --no-show --out ./bot
    """
    settings = load_settings_or_exit(ctx)
    require_api_key(settings)
    app = build_app(settings, overrides)

    artifacts = asyncio.run(_generate(app))

    if show:
        console.print(artifact_panel(artifacts.bot_code))
        console.print(artifact_panel(artifacts.backtest_code))

    if out_dir is not None:
        for path in write_artifacts(artifacts, out_dir):
            console.print(f"[green]Wrote[/green] [cyan]{path}[/cyan]")
