"""
Trend colorizer for reduced odds series
Colors each point against its predecessor on the same handicap line and flags
short same-color runs ("bubbles") as clusters
"""

from typing import Dict, List
import config

RED = 'red'
YELLOW = 'yellow'
GREEN = 'green'


def trend_color(diff: float, market: str, handicap: float,
                epsilon: float = config.TREND_EPSILON) -> str:
    """
    Color for a move of `diff` in the tracked odds value

    Yellow marks a move toward a goal: falling over odds, falling home odds on a
    negative line, rising home odds on a zero/positive line. Green is a move
    within epsilon. Anything else is red.
    """
    if abs(diff) <= epsilon:
        return GREEN

    rising_is_signal = market == config.HOME_AWAY_MARKET and handicap >= 0
    if rising_is_signal:
        return YELLOW if diff > epsilon else RED
    return YELLOW if diff < -epsilon else RED


def flag_clusters(points: List[Dict],
                  min_run: int = config.CLUSTER_MIN_RUN,
                  span: int = config.CLUSTER_SPAN_MINUTES) -> None:
    """
    Mark non-overlapping runs of same-colored non-red points, in place

    `points` is one handicap line sorted by minute. Its opening point is red
    only for lack of a reference, so it joins the run that follows it.
    """
    i = 0
    while i < len(points):
        start = points[i]
        run_color = start['color']
        if i == 0 and len(points) > 1:
            run_color = points[1]['color']

        if run_color == RED or start['cluster']:
            i += 1
            continue

        j = i + 1
        while (j < len(points)
               and points[j]['color'] == run_color
               and points[j]['minute'] - start['minute'] < span):
            j += 1

        if j - i >= min_run:
            for point in points[i:j]:
                point['cluster'] = True
            i = j
        else:
            i += 1


def colorize_market(points: List[Dict], market: str,
                    epsilon: float = config.TREND_EPSILON) -> List[Dict]:
    """
    Colorize a reduced market series, handicap lines tracked independently

    Args:
        points: output of odds_history.reduce_odds_history
        market: market key the points came from
        epsilon: stability band for odds moves

    Returns:
        MarketPoint dicts grouped by line (first-seen order), minute ascending
    """
    lines: Dict[float, List[Dict]] = {}
    for point in points:
        lines.setdefault(point['handicap'], []).append(point)

    colored: List[Dict] = []
    for handicap, line_points in lines.items():
        ordered = sorted(line_points, key=lambda p: p['minute'])
        result = []
        for idx, point in enumerate(ordered):
            color = RED
            if idx > 0:
                diff = point['value'] - ordered[idx - 1]['value']
                color = trend_color(diff, market, handicap, epsilon)
            result.append({
                'minute': point['minute'],
                'value': point['value'],
                'handicap': handicap,
                'line': point.get('line', str(handicap)),
                'color': color,
                'cluster': False,
            })
        flag_clusters(result)
        colored.extend(result)

    return colored
