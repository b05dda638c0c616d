"""Configuration command for QuantPilot CLI."""

import click
from rich.panel import Panel

from quantpilot.cli.common import console


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Write a template config file.

    \b
    Examples:
      quantpilot init
      quantpilot --config ./pilot.toml init --force
    """
    from quantpilot.config import CONFIG_PATH, create_template_config

    config_path = (ctx.obj or {}).get("config_path") or CONFIG_PATH

    if config_path.exists() and not force:
        console.print(Panel(
            f"[yellow]Config already exists:[/yellow] [cyan]{config_path}[/cyan]\n\n"
            "Use [cyan]--force[/cyan] to overwrite it.",
            title="[bold yellow]Skipped[/bold yellow]",
            border_style="yellow",
        ))
        return

    path = create_template_config(config_path)
    console.print(Panel(
        f"[green]Config written to[/green] [cyan]{path}[/cyan]\n\n"
        "Add your OpenAI API key under [cyan][openai][/cyan] or set "
        "[cyan]OPENAI_API_KEY[/cyan].",
        title="[bold green]Ready[/bold green]",
        border_style="green",
    ))
