"""
In-play statistics parser
Normalizes the feed's per-side counter pairs into a fixed-shape snapshot
"""

import math
import re
from typing import Dict, List, Optional

STAT_KEYS = (
    'attacks',
    'dangerous_attacks',
    'on_target',
    'off_target',
    'corners',
    'yellowcards',
    'redcards',
)

_LEADING_INT = re.compile(r'^\s*\+?(\d+)')


def parse_counter(value) -> int:
    """Parse a single counter value; anything non-numeric or negative becomes 0."""
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, int):
        return max(0, value)

    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(0, int(value))

    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


def parse_pair(value) -> List[int]:
    """Parse a [home, away] pair; wrong shape yields [0, 0]."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return [0, 0]
    return [parse_counter(value[0]), parse_counter(value[1])]


def parse_stats(raw: Optional[Dict]) -> Dict[str, List[int]]:
    """
    Convert the upstream stats map into a StatsSnapshot

    Args:
        raw: mapping of stat name to a two-element list of strings, or None

    Returns:
        Dict with one [home, away] pair per recognised stat key
    """
    if not isinstance(raw, dict):
        raw = {}

    return {key: parse_pair(raw.get(key)) for key in STAT_KEYS}


def combined(snapshot: Optional[Dict], key: str) -> int:
    """Home + away total of one stat pair."""
    if not snapshot:
        return 0
    pair = snapshot.get(key) or [0, 0]
    return pair[0] + pair[1]
