"""
Shot-event reconstruction from cumulative snapshot counters
"""

import logging
from typing import Dict, List
from stats_parser import combined

logger = logging.getLogger(__name__)


def counter_deltas(previous: Dict, current: Dict) -> Dict[str, int]:
    """Raw combined on/off-target deltas between two snapshots (may be negative)."""
    return {
        'on': combined(current, 'on_target') - combined(previous, 'on_target'),
        'off': combined(current, 'off_target') - combined(previous, 'off_target'),
    }


def derive_shot_events(history: Dict[int, Dict]) -> List[Dict]:
    """
    Rebuild discrete shot events by diffing consecutive snapshots

    One event per unit of positive delta, emitted at the later minute.
    A counter going backwards produces no events.
    """
    minutes = sorted(history)
    events: List[Dict] = []

    for prev_minute, minute in zip(minutes, minutes[1:]):
        deltas = counter_deltas(history[prev_minute], history[minute])

        for shot_type in ('on', 'off'):
            delta = deltas[shot_type]
            if delta < 0:
                logger.warning(
                    f"Shot counter regression at {minute}': {shot_type}-target "
                    f"dropped by {-delta} since {prev_minute}'"
                )
                continue
            events.extend({'minute': minute, 'type': shot_type} for _ in range(delta))

    return events
