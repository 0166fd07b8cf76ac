"""Textual-based UI for the interval timer."""

from typing import Callable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.timer import Timer
from textual.widgets import Footer, ProgressBar, Static

from .notifications import EffectHandler
from .scheduler import IntervalStateMachine, Phase, format_time

APP_TITLE = "Productivity Tools"

# Big digit glyphs, 5 lines tall
BIG_DIGITS = {
    "0": ["█▀▀█", "█  █", "█  █", "█  █", "█▄▄█"],
    "1": ["  ▄█", "   █", "   █", "   █", "   █"],
    "2": ["▀▀▀█", "   █", "█▀▀▀", "█   ", "█▄▄▄"],
    "3": ["▀▀▀█", "   █", " ▀▀█", "   █", "▄▄▄█"],
    "4": ["█  █", "█  █", "▀▀▀█", "   █", "   █"],
    "5": ["█▀▀▀", "█   ", "▀▀▀█", "   █", "▄▄▄█"],
    "6": ["█▀▀▀", "█   ", "█▀▀█", "█  █", "█▄▄█"],
    "7": ["▀▀▀█", "   █", "  █ ", " █  ", " █  "],
    "8": ["█▀▀█", "█  █", "█▀▀█", "█  █", "█▄▄█"],
    "9": ["█▀▀█", "█  █", "▀▀▀█", "   █", "▄▄▄█"],
    ":": ["    ", " ▪  ", "    ", " ▪  ", "    "],
}

_PHASE_CLASSES = {
    Phase.IDLE: "idle",
    Phase.WORKING: "work",
    Phase.SHORT_BREAK: "short-break",
    Phase.LONG_BREAK: "long-break",
}


def render_big_time(seconds: int) -> str:
    """Render time as big block digits."""
    time_str = format_time(seconds)
    lines = []
    for line_num in range(5):
        lines.append(" ".join(BIG_DIGITS[char][line_num] for char in time_str))
    return "\n".join(lines)


class BigTimer(Static):
    """Big countdown display."""

    def __init__(self, machine: IntervalStateMachine, **kwargs) -> None:
        super().__init__(**kwargs)
        self.machine = machine

    def on_mount(self) -> None:
        self.update_display()

    def update_display(self) -> None:
        self.update(render_big_time(self.machine.remaining))


class PhaseLabel(Static):
    """Phase label with cycle counter."""

    def __init__(self, machine: IntervalStateMachine, **kwargs) -> None:
        super().__init__(**kwargs)
        self.machine = machine

    def on_mount(self) -> None:
        self.update_display()

    def update_display(self) -> None:
        self.update(f"─── {self.machine.display_label()} ───")


class StatusBadge(Static):
    """Running/paused indicator plus the completed work count."""

    def __init__(self, machine: IntervalStateMachine, **kwargs) -> None:
        super().__init__(**kwargs)
        self.machine = machine

    def on_mount(self) -> None:
        self.update_display()

    def update_display(self) -> None:
        completed = f"Pomodoros completed: {self.machine.completed_work_phases}"
        if self.machine.running:
            self.update(f"▶ RUNNING   {completed}")
            self.set_class(False, "paused")
            self.set_class(True, "running")
        else:
            action = "START" if self.machine.is_fresh() else "PAUSED"
            self.update(f"⏸ {action}   {completed}")
            self.set_class(False, "running")
            self.set_class(True, "paused")


class TimerApp(App):
    """Interval timer application."""

    CSS = """
    #main {
        align: center middle;
    }
    #timer-container {
        width: auto;
        height: auto;
        padding: 1 4;
        border: round $primary;
    }
    #timer-container.work { border: round red; }
    #timer-container.short-break { border: round green; }
    #timer-container.long-break { border: round blue; }
    #phase-label, #big-timer, #status-badge {
        width: 100%;
        content-align: center middle;
    }
    #status-badge.running { color: $success; }
    #status-badge.paused { color: $warning; }
    """

    BINDINGS = [
        Binding("space", "toggle", "Start/Pause"),
        Binding("r", "reset", "Reset"),
        Binding("n", "skip", "Skip"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, machine: IntervalStateMachine) -> None:
        super().__init__()
        self.machine = machine
        self._tick_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        with Container(id="main"):
            with Vertical(id="timer-container"):
                yield PhaseLabel(self.machine, id="phase-label")
                yield BigTimer(self.machine, id="big-timer")
                yield StatusBadge(self.machine, id="status-badge")
                yield ProgressBar(total=100, id="progress", show_eta=False, show_percentage=False)
        yield Footer()

    def on_mount(self) -> None:
        handler = self.machine.effect_handler
        if isinstance(handler, EffectHandler):
            # Textual captures stdout, so ring through the app instead
            if handler.bell is None:
                handler.bell = self.bell
            # Webhook pushes must not stall the 1-second tick
            if handler.run_in_background is None:
                handler.run_in_background = self._run_in_thread
        self._refresh_display()
        self._tick_timer = self.set_interval(1.0, self._tick)

    def on_unmount(self) -> None:
        if self._tick_timer:
            self._tick_timer.stop()

    def _run_in_thread(self, work: Callable[[], None]) -> None:
        self.run_worker(work, group="notifications", thread=True, exit_on_error=False)

    def _tick(self) -> None:
        """Called every second."""
        # Effects run through the machine's effect handler inside tick()
        self.machine.tick()
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Update all display elements and the title."""
        self.query_one("#big-timer", BigTimer).update_display()
        self.query_one("#phase-label", PhaseLabel).update_display()
        self.query_one("#status-badge", StatusBadge).update_display()
        self.query_one("#progress", ProgressBar).update(progress=self.machine.progress_percent())
        self.title = self.machine.title_text(APP_TITLE)

        container = self.query_one("#timer-container")
        container.remove_class(*_PHASE_CLASSES.values())
        container.add_class(_PHASE_CLASSES[self.machine.phase])

    def action_toggle(self) -> None:
        """Start or pause the timer."""
        self.machine.toggle()
        self._refresh_display()

    def action_reset(self) -> None:
        """Reset current phase."""
        self.machine.reset()
        self._refresh_display()

    def action_skip(self) -> None:
        """Skip to next phase."""
        self.machine.skip()
        self._refresh_display()


def run_ui(machine: IntervalStateMachine) -> None:
    """Run the timer UI until the user quits."""
    TimerApp(machine).run()
