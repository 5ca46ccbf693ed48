"""
State Machine
-------------
Orchestrator lifecycle with checked transitions.

    UNINITIALIZED --initialize--> READY --reload--> RELOADING --done/failed--> READY

There is no way back to UNINITIALIZED: once a configuration has loaded,
a failed reload keeps the previous one active.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Callable, Deque, Dict, FrozenSet, List, Optional
import logging

from .errors import InvalidStateError


class State(Enum):
    """Lifecycle states of the orchestrator."""
    UNINITIALIZED = auto()  # Nothing loaded; only !exit and !version work
    READY = auto()          # Commands registered
    RELOADING = auto()      # Loading a new set; the old one still answers lookups


@dataclass
class StateTransition:
    """One recorded state change."""
    from_state: State
    to_state: State
    reason: str
    metadata: Dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __repr__(self) -> str:
        return f"StateTransition({self.from_state.name} → {self.to_state.name}: {self.reason})"


VALID_TRANSITIONS: Dict[State, FrozenSet[State]] = {
    State.UNINITIALIZED: frozenset({State.READY}),
    State.READY: frozenset({State.RELOADING}),
    State.RELOADING: frozenset({State.READY}),
}

Listener = Callable[[StateTransition], None]


class StateMachine:
    """
    Holds the current lifecycle state and rejects illegal moves.

    Keeps the most recent transitions for diagnostics and calls every
    listener after each change. A failing listener is logged and skipped.
    """

    def __init__(
        self,
        initial_state: State = State.UNINITIALIZED,
        logger: Optional[logging.Logger] = None,
        max_history: int = 50
    ):
        self._state = initial_state
        self._history: Deque[StateTransition] = deque(maxlen=max_history)
        self._listeners: List[Listener] = []
        self._logger = logger or logging.getLogger("keylauncher.state")

    @property
    def state(self) -> State:
        return self._state

    @property
    def history(self) -> List[StateTransition]:
        """Recorded transitions, oldest first."""
        return list(self._history)

    def can_transition(self, to_state: State) -> bool:
        return to_state in VALID_TRANSITIONS[self._state]

    def transition(
        self,
        to_state: State,
        reason: str,
        metadata: Optional[Dict] = None
    ) -> StateTransition:
        """
        Move to to_state.

        Raises:
            InvalidStateError: to_state is not reachable from the current state
        """
        if not self.can_transition(to_state):
            allowed = ", ".join(sorted(s.name for s in VALID_TRANSITIONS[self._state]))
            raise InvalidStateError(
                f"Cannot move from {self._state.name} to {to_state.name} "
                f"(allowed: {allowed or 'none'})"
            )

        record = StateTransition(self._state, to_state, reason, dict(metadata or {}))
        self._state = to_state
        self._history.append(record)
        self._logger.info(f"{record.from_state.name} → {to_state.name} ({reason})")

        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                self._logger.warning(f"State listener {listener!r} failed: {e}")

        return record

    def add_listener(self, callback: Listener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Listener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def get_history_summary(self, limit: int = 10) -> str:
        """Recent transitions, one per line."""
        if not self._history:
            return "No transitions recorded."

        recent = list(self._history)[-limit:]
        lines = [f"Last {len(recent)} transition(s):"]
        lines.extend(
            f"  {t.timestamp:%H:%M:%S}  {t.from_state.name} → {t.to_state.name}  {t.reason}"
            for t in recent
        )
        return "\n".join(lines)
