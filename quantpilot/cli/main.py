"""Main CLI entry point for QuantPilot.

This module provides the main click group and lazy loading
for heavy imports to improve startup time.
"""

from pathlib import Path
from typing import Optional

import click


class LazyGroup(click.Group):
    """Click group whose subcommands live in separate modules.

    ``lazy_subcommands`` maps a command name to the dotted module that
    defines it. A module (and the Agents SDK behind the service commands)
    is imported the first time its command is resolved, so ``--help``
    and the offline commands start quickly.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is None and cmd_name in self.lazy_subcommands:
            command = self._import_command(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        import importlib

        module_path = self.lazy_subcommands[cmd_name]
        module = importlib.import_module(module_path)
        candidates = [getattr(module, cmd_name, None)] + list(vars(module).values())
        for candidate in candidates:
            if isinstance(candidate, click.Command) and candidate.name == cmd_name:
                return candidate
        raise click.ClickException(f"{module_path} defines no '{cmd_name}' command")


LAZY_SUBCOMMANDS = {
    "init": "quantpilot.cli.configure",
    "assets": "quantpilot.cli.market",
    "watch": "quantpilot.cli.market",
    "wallet": "quantpilot.cli.wallet",
    "analyze": "quantpilot.cli.analyze",
    "generate": "quantpilot.cli.generate",
    "chat": "quantpilot.cli.chat",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="quantpilot")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: ~/.config/quantpilot/config.toml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """QuantPilot - simulated market feed with an AI trading pilot.

    Watch a synthetic market, get AI signals, split capital between a
    secure vault and trading, generate bot source code, and chat with
    Captain Quant.

    \b
    Quick Start:
      quantpilot init              # Write a config template
      quantpilot watch BTC         # Live simulated feed
      quantpilot analyze BTC       # AI signal for the current window
      quantpilot chat              # Talk to Captain Quant
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
