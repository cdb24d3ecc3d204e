from __future__ import annotations
"""Finite state machine helper for status lifecycles.

Usage:
    from franchise.utils.fsm import TransitionValidator
    TOPUP_FSM = TransitionValidator({
        'requested': {'paid'},
        'paid': set(),
    })
    TOPUP_FSM.assert_can_transition(current_status, target_status)

Raises ``InvalidState`` (409) if the transition is not in the graph.
"""
from typing import Dict, Set
from franchise.errors import InvalidState


class TransitionValidator:
    def __init__(self, graph: Dict[str, Set[str]], field_name: str = 'status'):
        self.graph = graph
        self.field_name = field_name

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.graph.get(current, set())

    def assert_can_transition(self, current: str, target: str):
        if not self.can_transition(current, target):
            raise InvalidState(f"Invalid {self.field_name} transition {current} -> {target}")
        return True

    def states(self):
        return list(self.graph.keys())

__all__ = ['TransitionValidator']
