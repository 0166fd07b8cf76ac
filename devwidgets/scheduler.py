"""Pure logic for the interval (pomodoro) timer state machine."""

import dataclasses
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, List, Optional, Union


class Phase(Enum):
    """Timer phase types."""
    IDLE = auto()
    WORKING = auto()
    SHORT_BREAK = auto()
    LONG_BREAK = auto()


@dataclass(frozen=True)
class Settings:
    """Timer settings. Durations are in seconds.

    Durations must be positive and ``long_break_interval`` at least 1; the
    machine does not check this itself.
    """
    work_duration: int = 25 * 60
    break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    long_break_interval: int = 4
    auto_start_breaks: bool = True
    auto_start_pomodoros: bool = False


@dataclass(frozen=True)
class TimerState:
    """Snapshot of the machine's state."""
    phase: Phase
    remaining: int
    running: bool
    completed_work_phases: int


@dataclass(frozen=True)
class PlaySound:
    """Request to play the alarm sound."""


@dataclass(frozen=True)
class ShowNotification:
    """Request to show a notification for the phase that just completed."""
    phase: Phase


Effect = Union[PlaySound, ShowNotification]
EffectHandler = Callable[[Effect], None]

# Setting field -> phase whose countdown it configures.
_DURATION_FIELDS = {
    "work_duration": Phase.WORKING,
    "break_duration": Phase.SHORT_BREAK,
    "long_break_duration": Phase.LONG_BREAK,
}

_PHASE_LABELS = {
    Phase.IDLE: "Ready",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}

_TITLE_LABELS = {
    Phase.IDLE: "Ready",
    Phase.WORKING: "Working",
    Phase.SHORT_BREAK: "Break",
    Phase.LONG_BREAK: "Long Break",
}


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS."""
    mins = seconds // 60
    secs = seconds % 60
    return f"{mins:02d}:{secs:02d}"


class IntervalStateMachine:
    """Interval timer state machine.

    Owns phase, remaining time, running flag and the completed work phase
    counter. Driven by ``tick()`` once per second from a single external
    scheduler; all calls must be serialized by the caller.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        effect_handler: Optional[EffectHandler] = None,
    ):
        """Initialize the machine in the idle phase.

        Args:
            settings: Timer settings. Defaults to 25/5/15 minutes, interval 4.
            effect_handler: Called with each effect emitted by ``tick()``.
        """
        self.settings = settings or Settings()
        self.effect_handler = effect_handler

        self._phase = Phase.IDLE
        self._remaining = 0
        self._running = False
        self._completed_work_phases = 0

    @property
    def phase(self) -> Phase:
        """Current phase."""
        return self._phase

    @property
    def remaining(self) -> int:
        """Seconds remaining in current phase."""
        return self._remaining

    @property
    def running(self) -> bool:
        """Whether ticks advance the countdown."""
        return self._running

    @property
    def completed_work_phases(self) -> int:
        """Number of work phases completed or skipped this session."""
        return self._completed_work_phases

    @property
    def state(self) -> TimerState:
        return TimerState(
            phase=self._phase,
            remaining=self._remaining,
            running=self._running,
            completed_work_phases=self._completed_work_phases,
        )

    def duration_of(self, phase: Phase) -> int:
        """Get configured duration in seconds for a given phase."""
        if phase == Phase.WORKING:
            return self.settings.work_duration
        elif phase == Phase.SHORT_BREAK:
            return self.settings.break_duration
        elif phase == Phase.LONG_BREAK:
            return self.settings.long_break_duration
        return 0

    def is_fresh(self) -> bool:
        """True if the current phase has not been counted down at all."""
        return self._remaining == self.duration_of(self._phase)

    def progress_percent(self) -> float:
        """Progress through current phase (0 to 100)."""
        if self._phase == Phase.IDLE:
            return 0.0
        total = self.duration_of(self._phase)
        if total == 0:
            return 100.0
        return 100 * (1 - self._remaining / total)

    def display_label(self) -> str:
        """Human-readable phase label, e.g. 'Working (2/4)'."""
        if self._phase == Phase.WORKING:
            current = self._completed_work_phases + 1
            return f"Working ({current}/{self.settings.long_break_interval})"
        return _PHASE_LABELS[self._phase]

    def title_text(self, app_title: str) -> str:
        """Window title in the form 'MM:SS - Working | <app_title>'."""
        return f"{format_time(self._remaining)} - {_TITLE_LABELS[self._phase]} | {app_title}"

    def start(self) -> None:
        """Start or resume the timer. Enters the work phase from idle."""
        if self._phase == Phase.IDLE:
            self._phase = Phase.WORKING
            self._remaining = self.settings.work_duration
        self._running = True

    def pause(self) -> None:
        """Pause the timer."""
        self._running = False

    def toggle(self) -> None:
        """Toggle between running and paused."""
        if self._running:
            self.pause()
        else:
            self.start()

    def reset(self) -> None:
        """Pause and restore current phase to its full duration."""
        self._running = False
        self._remaining = self.duration_of(self._phase)

    def skip(self) -> None:
        """Advance to the next phase immediately. Never auto-starts."""
        self._advance()
        self._running = False

    def update_settings(self, **changes) -> None:
        """Merge changed fields into the settings.

        While paused, a changed duration for the current phase resyncs the
        countdown. While running, the change applies at the next phase entry.

        Raises:
            TypeError: If a field name is not a setting.
        """
        self.settings = dataclasses.replace(self.settings, **changes)
        if self._running:
            return
        for name, value in changes.items():
            if _DURATION_FIELDS.get(name) == self._phase:
                self._remaining = value

    def tick(self) -> List[Effect]:
        """Advance the countdown by one second if running.

        Returns:
            Effects emitted on this tick: empty, or PlaySound followed by
            ShowNotification when a phase completed.
        """
        if not self._running:
            return []

        if self._remaining > 0:
            self._remaining -= 1

        if self._remaining != 0:
            return []

        effects: List[Effect] = [PlaySound(), ShowNotification(self._phase)]
        if self.effect_handler:
            for effect in effects:
                self.effect_handler(effect)

        self._advance()
        self._apply_auto_start()
        return effects

    def _advance(self) -> None:
        """Move to the next phase and load its duration."""
        if self._phase == Phase.WORKING:
            self._completed_work_phases += 1
            if self._completed_work_phases % self.settings.long_break_interval == 0:
                self._phase = Phase.LONG_BREAK
            else:
                self._phase = Phase.SHORT_BREAK
        else:
            # Any break, or idle, leads to work
            self._phase = Phase.WORKING
        self._remaining = self.duration_of(self._phase)

    def _apply_auto_start(self) -> None:
        if self._phase == Phase.WORKING:
            self._running = self.settings.auto_start_pomodoros
        else:
            self._running = self.settings.auto_start_breaks
