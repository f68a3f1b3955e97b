"""Simple finite state machine utility for status transitions.

Project and task lifecycles allow every transition, so their graphs are built
with ``TransitionValidator.unrestricted``; the validator still rejects
unknown target states.
Usage:
    from fieldops.utils.fsm import TransitionValidator
    TASK_FSM = TransitionValidator.unrestricted(TaskStatus.ALL)
    TASK_FSM.assert_can_transition(current_status, target_status)

Raises ValidationError (400) if invalid.
"""
from __future__ import annotations
from typing import Dict, Iterable, Set
from fieldops.errors import ValidationError

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    @classmethod
    def unrestricted(cls, states: Iterable[str], field_name: str = 'status') -> 'TransitionValidator':
        states = set(states)
        return cls({s: set(states) for s in states}, field_name)

    def assert_can_transition(self, current: str, target: str):
        allowed = self.graph.get(current, set())
        if target not in allowed:
            raise ValidationError(description=f"Invalid {self.field_name} transition {current} -> {target}")
        return True

__all__ = ['TransitionValidator']
