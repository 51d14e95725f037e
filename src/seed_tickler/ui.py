from typing import Optional

from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from seed_tickler.progress import LatestSlot, SearchSnapshot, SearchStatus


STATUS_STYLE = {
    SearchStatus.RUNNING: "bold yellow",
    SearchStatus.FOUND: "bold spring_green2",
    SearchStatus.EXHAUSTED: "bold red",
    SearchStatus.CANCELLED: "dim",
}


def format_duration(seconds: Optional[float]) -> str:
    """Render seconds as h:mm:ss, or ?? when unknown."""
    if seconds is None:
        return "??"
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def render(state: Optional[SearchSnapshot]):
    """Render a search snapshot."""
    if state is None:
        return Panel("Waiting for first update…", title="Seed Search", border_style="dim")

    style = STATUS_STYLE[state.status]
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="cyan")
    table.add_column()

    table.add_row("Status", f"[{style}]{state.status.value.upper()}[/{style}]")
    table.add_row("Start seed", f"{state.start_seed:08X}")
    table.add_row("Current seed", f"{state.current_seed:08X}")
    table.add_row("Seeds tried", f"{state.seeds_tried:,} / {state.seeds_total:,} ({state.percent:.4f}%)")
    table.add_row("Rate", f"{state.rate:,.0f} seeds/s on {state.workers} worker(s)")
    table.add_row("Elapsed", format_duration(state.elapsed))
    table.add_row("Remaining", format_duration(state.eta))
    if state.found_seed is not None:
        table.add_row("Found seed", f"[{style}]{state.found_seed:08X}[/{style}]")
    table.add_row("", ProgressBar(total=state.seeds_total or 1, completed=state.seeds_tried))

    return Panel(table, title=f"Seed Search  |  v{state.version}", border_style=style)


def ui_loop(slot: LatestSlot[SearchSnapshot]) -> None:
    """Redraw the panel until the search closes the slot."""
    with Live(render(None), refresh_per_second=10, screen=False) as live:
        while True:
            state = slot.get()
            if state is None:
                break
            live.update(render(state))
