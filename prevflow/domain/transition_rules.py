# SPDX-License-Identifier: Apache-2.0

"""
Transition rule matching.
"""

from typing import List, Optional

from ..models.board import TransitionRule
from ..models.enums import TransitionType
from .catalog import TRANSITION_RULES


def match_transition(
    source_column_id: str,
    target_column_id: str,
    rules: Optional[List[TransitionRule]] = None
) -> Optional[TransitionType]:
    """
    Find the transition type a move must collect data for.

    Args:
        source_column_id: Column the case is leaving
        target_column_id: Resolved destination column
        rules: Transition rules in declaration order

    Returns:
        Type of the first matching rule, or None for a direct move
    """
    rules = rules if rules is not None else TRANSITION_RULES
    for rule in rules:
        if rule.matches(source_column_id, target_column_id):
            return TransitionType(rule.type)
    return None
