"""
hostdeploy - UI Components
Standardized headers and the deployment summary panel
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hostdeploy.models.results import DeploymentReport

LOGO = "hostdeploy"

# Color scheme
BRAND_COLOR = "cyan"
SUCCESS_COLOR = "green"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized command header.

    Example:
        show_header(
            title="Deploy",
            details={"Server": "deploy@203.0.113.10", "Branch": "main"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"
    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{escape(subtitle)}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [{BRAND_COLOR}]{escape(str(value))}[/{BRAND_COLOR}]")

    console.print()


def show_summary(report: DeploymentReport, console: Optional[Console] = None) -> None:
    """Render the deployment summary panel."""
    if console is None:
        console = Console()

    table = Table.grid(padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Repository", escape(report.repository))
    table.add_row("Branch", escape(report.branch))
    table.add_row("Server", escape(report.server))
    table.add_row("Mode", escape(report.mode or "-"))
    table.add_row("Commit", escape((report.commit or "-")[:7]))
    table.add_row("Application URL", f"[bold {SUCCESS_COLOR}]{escape(report.url)}[/bold {SUCCESS_COLOR}]")
    table.add_row("Log File", escape(report.log_path or "-"))

    console.print()
    console.print(
        Panel(
            table,
            title="[bold]DEPLOYMENT SUMMARY[/bold]",
            title_align="left",
            border_style=SUCCESS_COLOR,
        )
    )
