"""Rich views for orchestration session status."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..orchestration.models import AgentStatus, Session
from .utils import format_timestamp, truncate

STATUS_ICONS = {
	AgentStatus.PENDING: "[dim][ ][/dim]",
	AgentStatus.ACTIVE: "[yellow][~][/yellow]",
	AgentStatus.COMPLETED: "[green][x][/green]",
	AgentStatus.FAILED: "[red][!][/red]",
}


def render_session_status(session: Optional[Session], console: Optional[Console] = None) -> None:
	"""Render a summary panel and the agent sequence for a session."""
	console = console or Console()

	if session is None:
		console.print("[dim]No active orchestration session.[/dim]")
		return

	lines = []
	lines.append(f"[bold]Goal:[/bold] {session.goal}")
	lines.append(f"[bold]Mode:[/bold] {session.mode.value}")
	lines.append(f"[bold]Status:[/bold] {session.status.value}")
	if session.routing.workflow:
		lines.append(
			f"[bold]Workflow:[/bold] {session.routing.workflow.value} "
			f"[dim](confidence {session.routing.confidence:.2f})[/dim]"
		)
	lines.append(f"[bold]Updated:[/bold] {format_timestamp(session.updated_at)}")
	console.print(Panel("\n".join(lines), title=f"Session: {session.id}", border_style="cyan"))

	if session.routing.agent_sequence:
		table = Table(title="Agent Sequence")
		table.add_column("#", justify="right")
		table.add_column("Agent", style="cyan")
		table.add_column("Status")
		table.add_column("Runs", justify="right")
		table.add_column("Failures", justify="right")

		for entry in session.routing.agent_sequence:
			state = session.agent_state(entry.agent)
			failures = len(session.failures_for(entry.agent))
			failure_style = "red" if failures else "dim"
			table.add_row(
				str(entry.order),
				entry.agent,
				f"{STATUS_ICONS.get(entry.status, '[ ]')} {entry.status.value}",
				str(state.invocation_count if state else 0),
				f"[{failure_style}]{failures}[/{failure_style}]",
			)
		console.print(table)

	if session.failures:
		console.print()
		console.print(f"[bold red]Failures ({len(session.failures)}):[/bold red]")
		for failure in session.failures[-5:]:
			console.print(f"  - {failure.agent}: {truncate(failure.error_message, 80)}")

	if session.checkpoints:
		console.print()
		console.print(f"[bold]Checkpoints ({len(session.checkpoints)}):[/bold]")
		for cp in session.checkpoints[-5:]:
			after = f" after {cp.after_agent}" if cp.after_agent else ""
			console.print(f"  - {cp.name} [dim]({cp.id}{after})[/dim]")
