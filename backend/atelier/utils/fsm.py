from __future__ import annotations
"""Simple finite state machine utility for enforcing allowed status transitions.

Used for the reception lifecycle (``etat``) and the nested return flow.
Usage:
    from atelier.utils.fsm import TransitionValidator
    STATE_FSM = TransitionValidator({
        'recus': {'en cours'},
        'en cours': {'finit'},
        'finit': set(),
    }, field_name='etat')
    STATE_FSM.assert_can_transition(current, target)

Raises InvalidTransition if the edge is not in the graph.
"""
from typing import Dict, Set
from atelier.errors import InvalidTransition

class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidTransition(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def transitions(self) -> Dict[str, list]:
        """Graph as sorted lists (JSON friendly)."""
        return {state: sorted(targets) for state, targets in self.graph.items()}

__all__ = ['TransitionValidator']
