"""Rich renderables for dashboard state."""

from typing import Optional

from rich.console import Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from quantpilot.market.history import PriceHistory
from quantpilot.models import BotConfig, ChatMessage, CodeArtifact, Signal
from quantpilot.wallet.allocation import AllocationSnapshot


SIGNAL_COLORS = {
    "BUY": "green",
    "SELL": "red",
}


def _change_markup(change: float) -> str:
    if change >= 0:
        return f"[green]▲ {change:+.2f}[/green]"
    return f"[red]▼ {change:+.2f}[/red]"


def candle_table(history: PriceHistory, rows: int = 10, title: str = "Live Market Feed") -> Table:
    """Newest ``rows`` candles, newest last."""
    table = Table(title=title, show_header=True, header_style="bold cyan")

    table.add_column("Time", style="dim")
    table.add_column("Open", justify="right")
    table.add_column("High", justify="right", style="green")
    table.add_column("Low", justify="right", style="red")
    table.add_column("Close", justify="right", style="bold")
    table.add_column("Change", justify="right")
    table.add_column("Volume", justify="right", style="dim")

    for candle in history.tail(rows):
        table.add_row(
            candle.time,
            f"{candle.open:,.2f}",
            f"{candle.high:,.2f}",
            f"{candle.low:,.2f}",
            f"{candle.close:,.2f}",
            _change_markup(candle.close - candle.open),
            f"{candle.volume:,}",
        )

    return table


def signal_panel(signal: Optional[Signal], pending: bool = False) -> Panel:
    """AI analyst card."""
    if signal is None:
        body = "[dim]Analyzing market conditions...[/dim]" if pending else "[dim]No signal yet.[/dim]"
        return Panel(body, title="[bold magenta]AI Analyst[/bold magenta]", border_style="magenta")

    color = SIGNAL_COLORS.get(signal.type, "yellow")
    filled = int(round(signal.confidence / 10))
    bar = "█" * filled + "░" * (10 - filled)

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="dim")
    grid.add_column()
    grid.add_row("Signal", f"[bold {color}]{signal.type}[/bold {color}]")
    grid.add_row("Confidence", f"[cyan]{bar}[/cyan] {signal.confidence:.0f}%")
    grid.add_row("Regime", signal.market_regime)
    grid.add_row("Sentiment", signal.sentiment)
    grid.add_row("At", signal.timestamp)

    return Panel(
        Group(grid, "", signal.reasoning),
        title="[bold magenta]AI Analyst[/bold magenta]",
        border_style="magenta",
    )


def allocation_panel(allocation: AllocationSnapshot, config: BotConfig) -> Panel:
    """Secure vault / trading wallet split."""
    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Wallet")
    table.add_column("Amount", justify="right")
    table.add_column("Status")

    if config.use_secure_wallet:
        vault_status = f"[bold blue]LOCKED[/bold blue] ({allocation.vault_percent:g}%)"
    else:
        vault_status = "[dim]Disabled[/dim]"

    table.add_row("Secure Vault", f"${allocation.vault_amount:,.2f}", vault_status)
    table.add_row("Trading Wallet", f"${allocation.trading_amount:,.2f}", "[bold green]ACTIVE[/bold green]")
    table.add_row("[bold]Total[/bold]", f"[bold]${allocation.total_capital:,.2f}[/bold]", "")

    return Panel(table, title="[bold cyan]Portfolio[/bold cyan]", border_style="cyan")


def artifact_panel(artifact: CodeArtifact) -> Panel:
    """Generated source file with syntax highlighting."""
    return Panel(
        Syntax(artifact.content, artifact.language, line_numbers=True, word_wrap=True),
        title=f"[bold cyan]{artifact.file_name}[/bold cyan]",
        subtitle=artifact.description,
        border_style="cyan",
    )


def message_panel(message: ChatMessage) -> Panel:
    """One chat message."""
    if message.sender == "user":
        return Panel(message.text, title="[bold]You[/bold]", title_align="right", border_style="dim")
    return Panel(
        Markdown(message.text),
        title="[bold cyan]Captain Quant[/bold cyan]",
        title_align="left",
        border_style="cyan",
    )
