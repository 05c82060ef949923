# rich-based operator console
#src/monitoring/console.py
"""
Operator-facing console for the bridge (using `rich`).

ConsoleObserver is the Observer collaborator the router and dispatcher
talk to. It renders:

- free-text replies from the planner
- proposed plans, as a table awaiting approval
- incoming command batches and per-command phase changes

It can also subscribe to the monitoring bus and keep a small status
summary (batches sent / rejected / failed, last reply kind) that
render_status() draws as a panel.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from capture.bus import EventBus
from routing.messages import CommandBatch, PlanBatch

from .events import EventType, MonitoringEvent

PHASE_STYLES = {
    "pending": "dim",
    "executing": "yellow",
    "completed": "green",
    "failed": "bold red",
    "interrupted": "magenta",
}


class ConsoleObserver:
    def __init__(self, console: Optional[Console] = None, monitor: Optional[EventBus] = None) -> None:
        self._console = console or Console()
        self._monitor = monitor

        self.last_text: Optional[str] = None
        self.current_plan: Optional[PlanBatch] = None
        self.command_phases: Dict[str, str] = {}

        self._status: Dict[str, Any] = {
            "batches_sent": 0,
            "batches_invalid": 0,
            "batches_failed": 0,
            "last_reply": None,
            "session_id": None,
        }

        if monitor is not None:
            monitor.subscribe(MonitoringEvent, self._on_event)

    def close(self) -> None:
        if self._monitor is not None:
            self._monitor.unsubscribe(MonitoringEvent, self._on_event)

    # --------------------------------------------------------
    # Observer channel
    # --------------------------------------------------------

    def show_text(self, text: str) -> None:
        self.last_text = text
        self._console.print(Panel(Text(text), title="Agent", border_style="cyan"))

    def show_plan(self, plan: PlanBatch) -> None:
        self.current_plan = plan
        self._console.print(self.render_plan(plan))

    def show_commands(self, batch: CommandBatch) -> None:
        table = Table(show_header=True, header_style="bold blue")
        table.add_column("Id", style="bold")
        table.add_column("Type")
        table.add_column("Params", overflow="fold")
        for command in batch.commands:
            table.add_row(command.id, command.type, command.params)
        title = f"Commands: {batch.goal_label or batch.goal_id}"
        self._console.print(Panel(table, title=title, border_style="blue"))

    def command_status(self, command_id: str, phase: str, error: Optional[str]) -> None:
        self.command_phases[command_id] = phase
        line = Text()
        line.append(f"{command_id} ", style="bold")
        line.append(phase, style=PHASE_STYLES.get(phase, ""))
        if error:
            line.append(f"  {error}", style="red")
        self._console.print(line)

    def show_images(self, file_names: List[str], caption: str = "") -> None:
        body = "\n".join(file_names) if file_names else "<none>"
        self._console.print(Panel(body, title=caption or "Agent camera", border_style="white"))

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def render_plan(self, plan: PlanBatch) -> Panel:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Id", style="bold")
        table.add_column("Action")
        table.add_column("Description", overflow="fold")
        table.add_column("Depends on")
        for item in plan.plan:
            depends = ", ".join(item.depends_on or []) or "-"
            table.add_row(item.id, item.action_type, item.description, depends)

        subtitle = Text(plan.talk_to_player) if plan.talk_to_player else None
        return Panel(
            table,
            title=f"Plan for approval: {plan.goal_label or plan.goal_id}",
            subtitle=subtitle,
            border_style="magenta",
        )

    def render_status(self) -> Panel:
        s = self._status
        table = Table.grid()
        table.add_column(justify="left")
        table.add_row(f"[bold]Session:[/bold] {s['session_id'] or '<none>'}")
        table.add_row(f"[bold]Batches sent:[/bold] {s['batches_sent']}")
        table.add_row(f"[bold]Rejected:[/bold] {s['batches_invalid']}")
        table.add_row(f"[bold]Failed:[/bold] {s['batches_failed']}")
        table.add_row(f"[bold]Last reply:[/bold] {s['last_reply'] or '-'}")
        return Panel(table, title="Bridge Status", border_style="green")

    @property
    def status(self) -> Dict[str, Any]:
        return dict(self._status)

    # --------------------------------------------------------
    # Monitoring events
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        et = event.event_type
        if et == EventType.BATCH_SENT:
            self._status["batches_sent"] += 1
        elif et == EventType.BATCH_INVALID:
            self._status["batches_invalid"] += 1
        elif et == EventType.BATCH_SEND_FAILED:
            self._status["batches_failed"] += 1
        elif et == EventType.REPLY_ROUTED:
            self._status["last_reply"] = event.payload.get("kind")
        elif et == EventType.SESSION_STARTED:
            self._status["session_id"] = event.correlation_id
