"""
Odds-history reducer
Folds replayed market ticks into one representative quote per minute
"""

import logging
import re
from typing import Dict, List, Optional, Tuple
import config

logger = logging.getLogger(__name__)

# Tracked side first, opposite side second
MARKET_FIELDS = {
    config.TOTALS_MARKET: ('over_od', 'under_od'),
    config.HOME_AWAY_MARKET: ('home_od', 'away_od'),
}

_LEADING_INT = re.compile(r'^\s*(\d+)')


def parse_minute(value) -> Optional[int]:
    """Parse an elapsed-minute string such as '23' or '45+2' (-> 45)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_odds(value) -> Optional[float]:
    """Parse a decimal odds string; empty or unparseable gives None."""
    if value in (None, ''):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        cleaned = str(value).strip().replace(',', '.')
        if not cleaned:
            return None
        return float(cleaned)
    except (TypeError, ValueError):
        return None


def parse_handicap(value) -> Optional[float]:
    """
    Parse a signed handicap line

    Split asian lines such as '0.0,-0.5' are averaged to their midpoint.
    """
    if value in (None, ''):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    parts = [p.strip() for p in str(value).split(',') if p.strip()]
    if not parts:
        return None
    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        return None
    return sum(numbers) / len(numbers)


def extract_market_ticks(odds_snapshot: Optional[Dict], market: str) -> Optional[List[Dict]]:
    """
    Pull results.odds[market] out of an odds payload

    Returns None when the market is absent so callers can keep the last series.
    """
    if not isinstance(odds_snapshot, dict):
        return None
    results = odds_snapshot.get('results')
    if not isinstance(results, dict):
        return None
    odds = results.get('odds')
    if not isinstance(odds, dict):
        return None
    ticks = odds.get(market)
    if not isinstance(ticks, list):
        return None
    return ticks


def _parse_tick(tick: Dict, fields: Tuple[str, str]) -> Optional[Dict]:
    if not isinstance(tick, dict):
        return None

    minute = parse_minute(tick.get('time_str'))
    value = parse_odds(tick.get(fields[0]))
    opposite = parse_odds(tick.get(fields[1]))
    raw_line = tick.get('handicap')
    handicap = parse_handicap(raw_line)

    if minute is None or value is None or opposite is None or handicap is None:
        return None

    return {
        'minute': minute,
        'value': value,
        'opposite': opposite,
        'handicap': handicap,
        'line': str(raw_line).strip(),
    }


def reduce_odds_history(ticks: Optional[List[Dict]], market: str) -> List[Dict]:
    """
    Reduce raw ticks for one market to one representative point per minute

    Within a minute the tick whose two sides are closest (most balanced) wins;
    ties keep the first tick seen. Ticks missing any required field are dropped.

    Args:
        ticks: raw OddsTick dicts from the feed, any order
        market: '1_3' (over/under) or '1_2' (home/away)

    Returns:
        Points sorted by minute ascending
    """
    if market not in MARKET_FIELDS:
        raise ValueError(f"Unsupported market: {market}")

    fields = MARKET_FIELDS[market]
    best: Dict[int, Dict] = {}
    skipped = 0

    for tick in ticks or []:
        point = _parse_tick(tick, fields)
        if point is None:
            skipped += 1
            continue

        current = best.get(point['minute'])
        if current is None:
            best[point['minute']] = point
            continue

        spread = abs(point['value'] - point['opposite'])
        current_spread = abs(current['value'] - current['opposite'])
        if spread < current_spread:
            best[point['minute']] = point

    if skipped:
        logger.debug(f"Market {market}: skipped {skipped} incomplete ticks")

    return [best[minute] for minute in sorted(best)]
