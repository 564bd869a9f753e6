"""
Per-tick analysis pipeline for one live match
Stats parse -> history update -> market reduction/colorizing -> detection ->
shot reconstruction, fully recomputed from the raw histories on every tick
"""

import logging
from typing import Dict, Optional
import config
from checklist import evaluate_checklist
from history_store import MatchHistoryStore
from momentum import build_api_series
from odds_history import extract_market_ticks, parse_minute as parse_minute_value, reduce_odds_history
from pattern_detector import PatternDetector
from shot_events import derive_shot_events
from stats_parser import parse_stats
from trend_colorizer import colorize_market


def parse_minute(match: Dict) -> Optional[int]:
    """Elapsed minute from the match clock (timer.tm), falling back to `time`."""
    timer = match.get('timer')
    if isinstance(timer, dict):
        minute = parse_minute_value(timer.get('tm'))
        if minute is not None:
            return minute
    return parse_minute_value(match.get('time'))


class MatchPipeline:
    """Owns the derived state for the active match"""

    def __init__(self, store: Optional[MatchHistoryStore] = None,
                 detector: Optional[PatternDetector] = None):
        self.store = store or MatchHistoryStore()
        self.detector = detector or PatternDetector()
        self.logger = logging.getLogger(__name__)
        self.over_under = []
        self.home_odds = []

    @property
    def match_id(self) -> Optional[str]:
        return self.store.match_id

    def open_match(self, match_id):
        """Switch to another match; derived series restart from its persisted state"""
        if str(match_id) == self.store.match_id:
            return
        self.store.open_match(match_id)
        self.over_under = []
        self.home_odds = []

    def update_markets(self, odds: Optional[Dict]):
        """Recompute both colorized market series from the full odds payload"""
        for market, attr in ((config.TOTALS_MARKET, 'over_under'),
                             (config.HOME_AWAY_MARKET, 'home_odds')):
            ticks = extract_market_ticks(odds, market)
            if ticks is None:
                # Market missing this tick: keep the last derived series
                continue
            points = reduce_odds_history(ticks, market)
            setattr(self, attr, colorize_market(points, market))

    def process_tick(self, match: Optional[Dict], odds: Optional[Dict]) -> Optional[Dict]:
        """
        Run one polling tick through the pipeline

        Args:
            match: MatchSnapshot payload (id, timer/time, ss, stats)
            odds: OddsSnapshot payload (results.odds['1_3'/'1_2'])

        Returns:
            Derived view of the match, or None when no match is active
        """
        if match:
            match_id = match.get('id')
            if match_id is not None:
                self.open_match(match_id)

        if self.store.match_id is None:
            self.logger.debug("Tick skipped: no active match")
            return None

        minute = parse_minute(match) if match else None
        raw_stats = match.get('stats') if match else None
        stats = parse_stats(raw_stats) if raw_stats else None

        if minute is not None and stats is not None:
            self.store.record_snapshot(minute, stats)

        self.update_markets(odds)

        history = self.store.stats_history
        self.detector.detect(minute, history, self.over_under, self.home_odds, self.store)

        if stats is None:
            # No stats this tick: show the latest recorded snapshot
            stats = history[max(history)] if history else parse_stats(None)

        analysis = self.detector.analyze(minute, history, self.over_under, self.home_odds)

        return {
            'match_id': self.store.match_id,
            'minute': minute,
            'score': (match or {}).get('ss') or '0-0',
            'stats': stats,
            'api_series': build_api_series(history),
            'over_under': self.over_under,
            'home_odds': self.home_odds,
            'analysis': analysis,
            'highlights': {
                'over_under': self.store.sorted_highlights('over_under'),
                'home_odds': self.store.sorted_highlights('home_odds'),
            },
            'shot_events': derive_shot_events(history),
            'checklist': evaluate_checklist(analysis, stats),
        }
