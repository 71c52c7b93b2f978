"""hostdeploy - Doctor command"""

import click
from rich.table import Table

from hostdeploy.base import BaseCommand
from hostdeploy.constants import REQUIRED_LOCAL_TOOLS
from hostdeploy.utils import find_tool


class DoctorCommand(BaseCommand):
    """Checks the local tools the pipeline shells out to."""

    def __init__(self, verbose: bool = False):
        super().__init__(verbose=verbose)
        self.table = Table(
            title="Local Prerequisites", title_justify="left", padding=(0, 1)
        )
        self.table.add_column("Check", style="cyan", no_wrap=True)
        self.table.add_column("Status")
        self.table.add_column("Details", style="dim")

    def check_tools(self) -> list[str]:
        """Check required tools. Returns the missing ones."""
        missing = []
        for tool in REQUIRED_LOCAL_TOOLS:
            path = find_tool(tool)
            if path:
                self.table.add_row(f"✅ {tool}", "[green]Installed[/green]", path)
            else:
                missing.append(tool)
                self.table.add_row(f"❌ {tool}", "[red]Missing[/red]", f"Install {tool}")
        return missing

    def execute(self) -> None:
        self.show_header(title="Doctor", subtitle="Checking local prerequisites")
        missing = self.check_tools()
        self.console.print(self.table)

        if missing:
            self.print_error(f"Missing tools: {', '.join(missing)}")
            raise SystemExit(1)
        self.print_success("All prerequisites found")


@click.command(name="doctor")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def doctor(verbose):
    """Check that git, ssh and rsync are available locally"""
    DoctorCommand(verbose=verbose).run()
