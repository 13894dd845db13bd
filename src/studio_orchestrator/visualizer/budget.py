"""Rich views for context pool budgets and learnings scans."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..budget.pools import POOL_DESCRIPTIONS, PoolReport
from ..budget.tiers import TOKEN_SHARE, ScanReport, Tier
from .utils import pool_status_style, progress_bar


def render_pool_budget(report: PoolReport, console: Optional[Console] = None) -> None:
	"""Render a single pool with a progress bar against its soft limit."""
	console = console or Console()
	style = pool_status_style(report.status)
	pct = report.percent_of_soft

	lines = []
	lines.append(f"[dim]{POOL_DESCRIPTIONS.get(report.pool, '')}[/dim]")
	lines.append("")
	lines.append(f"[{style}]{progress_bar(pct)}[/{style}] {pct}%")
	lines.append("")
	lines.append(f"[bold]Used:[/bold] {report.used:,} tokens")
	lines.append(f"[bold]Soft limit:[/bold] {report.soft_limit:,}")
	lines.append(f"[bold]Hard limit:[/bold] {report.hard_limit:,}")
	lines.append(f"[bold]Status:[/bold] [{style}]{report.status.value}[/{style}]")

	console.print(Panel("\n".join(lines), title=f"Pool: {report.pool}", border_style=style))


def render_budget_table(reports: list[PoolReport], console: Optional[Console] = None) -> None:
	"""Render all pools as one table with totals."""
	console = console or Console()

	table = Table(title="Context Budget")
	table.add_column("Pool", style="cyan")
	table.add_column("Used", justify="right")
	table.add_column("Soft", justify="right")
	table.add_column("Hard", justify="right")
	table.add_column("%", justify="right")
	table.add_column("Status")

	for r in reports:
		style = pool_status_style(r.status)
		table.add_row(
			r.pool,
			f"{r.used:,}",
			f"{r.soft_limit:,}",
			f"{r.hard_limit:,}",
			f"{r.percent_of_soft}%",
			f"[{style}]{r.status.value}[/{style}]",
		)

	total_used = sum(r.used for r in reports)
	total_soft = sum(r.soft_limit for r in reports)
	total_pct = total_used * 100 // total_soft if total_soft else 0
	table.add_section()
	table.add_row("[bold]TOTAL[/bold]", f"{total_used:,}", f"{total_soft:,}", "", f"{total_pct}%", "")

	console.print(table)


def render_scan_report(report: ScanReport, console: Optional[Console] = None) -> None:
	"""Render tier counts and the entries flagged for summarization or archival."""
	console = console or Console()

	if not report.source_exists:
		console.print("[dim]No learnings directory found.[/dim]")
		return

	table = Table(title=f"Learnings Scan ({report.scope})")
	table.add_column("Tier", style="cyan")
	table.add_column("Entries", justify="right")
	table.add_column("Retention")

	for tier in Tier:
		table.add_row(tier.value, str(report.count(tier)), TOKEN_SHARE[tier])
	console.print(table)

	style = pool_status_style(report.status)
	console.print(
		f"Files: {len(report.files)}  Entries: {len(report.entries)}  "
		f"Tokens: {report.tokens:,}/{report.soft_limit:,} "
		f"[{style}]({report.percent_of_soft}%, {report.status})[/{style}]"
	)

	if report.needs_summarization:
		console.print()
		console.print("[yellow]Needs summarization:[/yellow]")
		for ref in report.needs_summarization:
			console.print(f"  - {ref}")

	if report.needs_archiving:
		console.print()
		console.print("[red]Needs archiving:[/red]")
		for ref in report.needs_archiving:
			console.print(f"  - {ref}")
