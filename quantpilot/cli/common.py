"""Shared helpers for QuantPilot CLI commands."""

import functools
from pathlib import Path
from typing import Any, Callable, Optional

import click
from click.core import ParameterSource
from rich.console import Console
from rich.panel import Panel

from quantpilot.models import AIModel, MarketType, RiskProfile, StrategyType

console = Console()


def print_error(message: str, title: str = "Error") -> None:
    """Render an error panel."""
    console.print(Panel(
        f"[red]{message}[/red]",
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def load_settings_or_exit(ctx: click.Context):
    """Load settings from the path given to the group, or the default.

    Exits with status 1 if the file is invalid.
    """
    from quantpilot.config import load_settings
    from quantpilot.errors import ConfigurationError
    from quantpilot.log import setup_logging

    config_path: Optional[Path] = (ctx.obj or {}).get("config_path")
    try:
        settings = load_settings(config_path)
    except ConfigurationError as e:
        print_error(str(e), title="Configuration Error")
        raise SystemExit(1)

    setup_logging(settings.logging.level)
    return settings


def require_api_key(settings) -> None:
    """Exit with a hint when no OpenAI API key is configured."""
    if settings.get_api_key():
        return
    from quantpilot.config import CONFIG_PATH

    console.print(Panel(
        "[red]OpenAI API key not configured.[/red]\n\n"
        "Set [cyan]OPENAI_API_KEY[/cyan] or add it to:\n"
        f"[cyan]{CONFIG_PATH}[/cyan]",
        title="[bold red]Configuration Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def build_app(settings, overrides: dict[str, Any], symbol: Optional[str] = None, client: Any = None):
    """Create a PilotApp with CLI overrides applied and ``symbol`` tracked.

    Exits with status 1 on an invalid override or unknown symbol.
    """
    from quantpilot.agents.base import GenerationClient
    from quantpilot.app import PilotApp
    from quantpilot.errors import ConfigurationError

    if client is None:
        client = GenerationClient(
            model=settings.get_model(),
            api_key=settings.get_api_key(),
            timeout=settings.requests.timeout,
            console=console,
        )
    app = PilotApp(settings, client=client)

    try:
        if overrides:
            app.update_config(**overrides)
        if symbol:
            app.select_instrument(symbol)
    except (ConfigurationError, ValueError) as e:
        print_error(str(e))
        raise SystemExit(1)

    return app


def _choice(enum_type) -> click.Choice:
    return click.Choice(list(enum_type.__members__), case_sensitive=False)


BOT_OPTIONS = [
    click.option("--market", type=_choice(MarketType), default=None, help="Target market."),
    click.option("--strategy", type=_choice(StrategyType), default=None, help="Trading strategy."),
    click.option("--risk-profile", type=_choice(RiskProfile), default=None, help="Risk profile."),
    click.option("--model", "ai_model", type=_choice(AIModel), default=None, help="Prediction model."),
    click.option("--risk-per-trade", type=float, default=None, help="Percent of capital risked per trade."),
    click.option("--stop-loss", type=float, default=None, help="Stop loss percent."),
    click.option("--take-profit", type=float, default=None, help="Take profit percent."),
    click.option("--leverage", type=int, default=None, help="Leverage multiplier."),
    click.option("--vault-reserve", "vault_reserve_percent", type=float, default=None,
                 help="Percent of capital locked in the secure vault."),
    click.option("--vault/--no-vault", "use_secure_wallet", default=None, help="Enable the secure vault."),
    click.option("--strict-no-loss/--allow-loss", "strict_no_loss_mode", default=None,
                 help="Only allow hedged or arbitrage entries."),
]

BOT_OPTION_NAMES = (
    "market", "strategy", "risk_profile", "ai_model", "risk_per_trade", "stop_loss",
    "take_profit", "leverage", "vault_reserve_percent", "use_secure_wallet", "strict_no_loss_mode",
)


def bot_config_options(func: Callable) -> Callable:
    """Add bot configuration flags; the command receives them as ``overrides``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        overrides = {}
        for name in BOT_OPTION_NAMES:
            value = kwargs.pop(name, None)
            # Only flags given on the command line override the config file
            if value is None or ctx.get_parameter_source(name) is ParameterSource.DEFAULT:
                continue
            overrides[name] = value
        return func(*args, overrides=overrides, **kwargs)

    for option in reversed(BOT_OPTIONS):
        wrapper = option(wrapper)
    return wrapper
