"""
Attacking pressure index (API) scorer
"""

from typing import Dict, List, Optional, Union
import config

SIDES = {'home': 0, 'away': 1}


def _side_index(side: Union[int, str]) -> int:
    if isinstance(side, str):
        return SIDES[side.lower()]
    if side not in (0, 1):
        raise ValueError(f"Unknown side: {side}")
    return side


def calculate_api_score(snapshot: Optional[Dict], side: Union[int, str]) -> float:
    """
    Single-side pressure score from a stats snapshot

    score = shots*1.0 + on_target*3.0 + corners*0.7 + dangerous_attacks*0.1
    where shots = on_target + off_target. Missing snapshot scores 0.
    """
    if not snapshot:
        return 0.0

    idx = _side_index(side)
    on_target = snapshot.get('on_target', [0, 0])[idx]
    off_target = snapshot.get('off_target', [0, 0])[idx]
    corners = snapshot.get('corners', [0, 0])[idx]
    dangerous = snapshot.get('dangerous_attacks', [0, 0])[idx]
    shots = on_target + off_target

    return (
        shots * config.API_SHOT_WEIGHT
        + on_target * config.API_ON_TARGET_WEIGHT
        + corners * config.API_CORNER_WEIGHT
        + dangerous * config.API_DANGEROUS_ATTACK_WEIGHT
    )


def combined_api_score(snapshot: Optional[Dict]) -> float:
    return calculate_api_score(snapshot, 0) + calculate_api_score(snapshot, 1)


def build_api_series(history: Dict[int, Dict]) -> List[Dict]:
    """Per-minute home/away API values, ascending by minute."""
    return [
        {
            'minute': minute,
            'homeApi': calculate_api_score(history[minute], 0),
            'awayApi': calculate_api_score(history[minute], 1),
        }
        for minute in sorted(history)
    ]
