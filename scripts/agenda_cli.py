#!/usr/bin/env python3
"""Interactive terminal agenda for browsing a running calendar service."""

import sys
from datetime import datetime

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table


class AgendaCLI:
    """Terminal front end over the calendar view endpoints."""

    def __init__(self, base_url: str = "http://localhost:8000"):
        """Initialize agenda CLI."""
        self.base_url = base_url
        self.view_id: str | None = None
        self.console = Console()
        self.client = httpx.Client(timeout=60.0)

    def start(self) -> None:
        """Start the interactive agenda session."""
        self.console.print(
            Panel.fit(
                "[bold blue]Clinic Calendar - Agenda[/bold blue]\n"
                "Browse appointments by day, week or month.\n"
                "Commands: /help, /quit",
                border_style="blue",
            )
        )

        if not self._test_connection():
            self.console.print(f"[red]Cannot connect to the calendar service at {self.base_url}.[/red]")
            return

        view = self._call("POST", "/views", json={"view": "week"})
        if not view:
            return
        self.view_id = view["session_id"]
        self._display_view(view)

        try:
            while True:
                command = Prompt.ask("\n[bold cyan]agenda[/bold cyan]").strip().lower()

                if command in ["/quit", "/exit", "quit", "exit", "q"]:
                    break
                elif command in ["/help", "?"]:
                    self._show_help()
                    continue
                elif command == "":
                    continue

                view = self._handle_command(command)
                if view:
                    self._display_view(view)

        except KeyboardInterrupt:
            pass
        finally:
            if self.view_id:
                self._call("DELETE", f"/views/{self.view_id}")
            self.console.print("\n[yellow]Goodbye![/yellow]")
            self.client.close()

    def _handle_command(self, command: str) -> dict | None:
        """Map a typed command onto a view endpoint."""
        path = f"/views/{self.view_id}"
        if command in ["n", "next"]:
            return self._call("POST", f"{path}/navigate", json={"action": "next"})
        if command in ["p", "prev"]:
            return self._call("POST", f"{path}/navigate", json={"action": "prev"})
        if command in ["t", "today"]:
            return self._call("POST", f"{path}/navigate", json={"action": "today"})
        if command in ["day", "week", "month"]:
            return self._call("PUT", f"{path}/mode", json={"view": command})
        if command.startswith("goto "):
            return self._call("POST", f"{path}/navigate", json={"action": "goto", "target": command[5:].strip()})
        if command.startswith("toggle "):
            return self._call("POST", f"{path}/calendars/{command[7:].strip()}/toggle")
        if command.startswith("status "):
            statuses = [value.strip().upper() for value in command[7:].split(",") if value.strip()]
            return self._call("PUT", f"{path}/filters", json={"statuses": statuses})
        if command == "clear":
            return self._call("PUT", f"{path}/filters", json={})
        if command == "reload":
            return self._call("POST", f"{path}/reload")

        self.console.print(f"[yellow]Unknown command: {command}[/yellow]")
        return None

    def _test_connection(self) -> bool:
        """Test connection to the service."""
        try:
            response = self.client.get(f"{self.base_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _call(self, method: str, path: str, **kwargs) -> dict | None:
        try:
            response = self.client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            self.console.print(f"[red]Connection error: {e}[/red]")
            return None

        if response.status_code >= 400:
            self.console.print(f"[red]API Error: {response.status_code} - {response.text}[/red]")
            return None
        return response.json() if response.content else None

    def _display_view(self, view: dict) -> None:
        """Render the current window as a table of events."""
        table = Table(show_lines=False, expand=True)
        table.add_column("When", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("Calendar", style="dim")

        for event in view.get("events", []):
            start = datetime.fromisoformat(event["start"])
            end = datetime.fromisoformat(event["end"])
            color = event.get("background_color", "white")
            table.add_row(
                f"{start:%a %d %b %H:%M}-{end:%H:%M}",
                f"[{color}]■[/{color}] {event['title']}",
                event["calendar_id"],
            )

        shown = len(view.get("events", []))
        subtitle = f"{shown} of {view.get('total_events', 0)} events shown"
        if not view.get("calendars_loaded"):
            subtitle += " (calendars not loaded)"

        self.console.print(
            Panel(
                table if shown else "[dim]No events in this period[/dim]",
                title=f"[bold green]{view['label']}[/bold green] [dim]({view['state']['view']})[/dim]",
                subtitle=subtitle,
                border_style="green",
            )
        )

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Navigation:[/bold]
• n / p - Next or previous period
• t - Jump to today
• goto YYYY-MM-DD - Jump to a date
• day / week / month - Change the view

[bold]Filters:[/bold]
• status ACTIVE,CONFIRMED - Show only these statuses
• toggle <calendar id> - Show or hide a calendar
• clear - Remove all filters
• reload - Reload calendars, sites, therapists and patients

• /quit - Exit
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the agenda CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

    agenda = AgendaCLI(base_url)
    agenda.start()


if __name__ == "__main__":
    main()
