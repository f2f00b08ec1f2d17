"""Rich rendering for infra plans and apply results."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from orc.core.models import ApplyPlan, Plan
from orc.core.reconcile import ReconcileResult

_OK = "[green]✓[/green]"
_MISSING = "[yellow]✗[/yellow]"
_ORPHAN = "[red]![/red]"


def _mark(present: bool) -> str:
    return _OK if present else _MISSING


def render_plan(console: Console, plan: Plan, apply_plan: ApplyPlan) -> None:
    console.print(f"[bold]Workshop {plan.workshop_id}[/bold] ({plan.workshop_name})")
    console.print(f"Factory: {plan.factory_id} ({plan.factory_name})")
    console.print()

    gatehouse = plan.gatehouse
    console.print(
        f"Gatehouse {gatehouse.id}: {gatehouse.path}  "
        f"dir {_mark(gatehouse.exists)}  config {_mark(gatehouse.config_exists)}"
    )

    if plan.workbenches:
        table = Table(title="Workbenches", show_edge=False)
        table.add_column("ID")
        table.add_column("Name")
        table.add_column("Path")
        table.add_column("Repo")
        table.add_column("Worktree", justify="center")
        table.add_column("Config", justify="center")
        for op in plan.workbenches:
            repo = f"{op.repo_name}@{op.branch}" if op.branch else op.repo_name
            table.add_row(op.id, op.name, op.path, repo, _mark(op.exists), _mark(op.config_exists))
        console.print(table)
    else:
        console.print("No active workbenches.")

    session = plan.tmux_session
    console.print()
    console.print(f"Session {session.session_name}: {_mark(session.exists)}")
    for window in session.windows:
        console.print(f"  {_mark(window.exists)} {window.name}  [dim]{window.path}[/dim]")

    if plan.has_orphans:
        console.print()
        console.print("[bold red]Orphans[/bold red] (not in registry)")
        for orphan in plan.orphan_gatehouses:
            console.print(f"  {_ORPHAN} gatehouse {orphan.id}: {orphan.path}")
        for orphan in plan.orphan_workbenches:
            console.print(f"  {_ORPHAN} workbench {orphan.id}: {orphan.path}")
        for window in session.orphan_windows:
            console.print(f"  {_ORPHAN} window {window.name}")

    render_window_health(console, apply_plan)

    console.print()
    if plan.nothing_to_do:
        console.print("[green]Nothing to do.[/green]")
        return
    render_actions(console, apply_plan)


def render_window_health(console: Console, apply_plan: ApplyPlan) -> None:
    if not apply_plan.window_summary:
        return
    console.print()
    table = Table(title="Window health", show_edge=False)
    table.add_column("Window")
    table.add_column("Panes", justify="right")
    table.add_column("Healthy", justify="center")
    for status in apply_plan.window_summary:
        table.add_row(status.name, str(status.pane_count), _mark(status.healthy))
    console.print(table)


def render_actions(console: Console, apply_plan: ApplyPlan) -> None:
    if apply_plan.is_empty:
        console.print("No tmux actions.")
        return
    console.print("[bold]Pending actions[/bold]")
    for index, action in enumerate(apply_plan.actions, start=1):
        console.print(f"  {index}. [cyan]{action.type.value}[/cyan] {action.description}")


def render_result(console: Console, result: ReconcileResult) -> None:
    for path in result.materialized.created:
        console.print(f"[green]Created[/green] {path}")
    for op in result.materialized.skipped_worktrees:
        console.print(f"[yellow]Skipped[/yellow] {op.id}: no worktree at {op.path}")
    for action in result.applied:
        console.print(f"{_OK} {action.type.value}: {action.description}")
    for warning in result.enrichment_warnings:
        console.print(f"[yellow]Warning:[/yellow] enrichment failed for {warning}")
    if not result.applied and not result.materialized.created:
        console.print("[green]Nothing to do.[/green]")
