"""
Match History Store
Per-match snapshot history and highlight lists with JSON file persistence
"""

import json
import os
import logging
from datetime import datetime
from typing import Dict, List, Optional
import config
from stats_parser import STAT_KEYS, parse_stats

HIGHLIGHT_VIEWS = ('over_under', 'home_odds')
HIGHLIGHT_LEVELS = ('weak', 'medium', 'strong')


def empty_highlights() -> Dict[str, List[Dict]]:
    return {view: [] for view in HIGHLIGHT_VIEWS}


def has_counter_regression(previous: Dict, current: Dict) -> bool:
    """True if any cumulative counter in `current` is below `previous`."""
    for key in STAT_KEYS:
        prev_pair = previous.get(key, [0, 0])
        cur_pair = current.get(key, [0, 0])
        if cur_pair[0] < prev_pair[0] or cur_pair[1] < prev_pair[1]:
            return True
    return False


class MatchHistoryStore:
    def __init__(self, db_file: str = config.DATABASE_FILE):
        self.db_file = db_file
        self.logger = logging.getLogger(__name__)
        self.matches = self._load_database()
        self.match_id: Optional[str] = None
        self.stats_history: Dict[int, Dict] = {}
        self.highlights: Dict[str, List[Dict]] = empty_highlights()

    def _load_database(self) -> Dict:
        """Load match history database from file"""
        if os.path.exists(self.db_file):
            try:
                with open(self.db_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                self.logger.warning("History database is not a JSON object. Starting fresh.")
            except (ValueError, OSError) as e:
                self.logger.warning(f"Error loading history database: {e}. Starting fresh.")
        return {}

    def _save_database(self):
        """Persist database to file"""
        try:
            with open(self.db_file, 'w', encoding='utf-8') as f:
                json.dump(self.matches, f, indent=2)
        except IOError as e:
            self.logger.error(f"Error saving history database: {e}")

    # ------------------------------------------------------------------
    # (De)serialisation
    # ------------------------------------------------------------------

    def _decode_history(self, raw) -> Dict[int, Dict]:
        history: Dict[int, Dict] = {}
        if not isinstance(raw, dict):
            return history
        for key, snapshot in raw.items():
            try:
                minute = int(key)
            except (TypeError, ValueError):
                self.logger.debug(f"Dropping history entry with bad minute key {key!r}")
                continue
            if minute < 0:
                continue
            history[minute] = parse_stats(snapshot)
        return history

    def _decode_highlights(self, raw) -> Dict[str, List[Dict]]:
        highlights = empty_highlights()
        if not isinstance(raw, dict):
            return highlights
        for view in HIGHLIGHT_VIEWS:
            entries = raw.get(view)
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                minute = entry.get('minute')
                level = entry.get('level')
                if not isinstance(minute, int) or level not in HIGHLIGHT_LEVELS:
                    continue
                highlights[view].append({
                    'minute': minute,
                    'level': level,
                    'label': str(entry.get('label', '')),
                })
        return highlights

    def _persist_active(self):
        self.matches[self.match_id] = {
            'stats_history': {str(minute): snapshot for minute, snapshot in self.stats_history.items()},
            'highlights': self.highlights,
            'updated_at': datetime.now().isoformat(),
        }
        self._save_database()

    def load_match(self, match_id) -> Dict:
        """Read persisted state for a match without activating it"""
        entry = self.matches.get(str(match_id))
        if entry is None:
            return {'stats_history': {}, 'highlights': empty_highlights()}
        if not isinstance(entry, dict):
            self.logger.warning(f"Corrupted state for match {match_id}. Starting fresh.")
            return {'stats_history': {}, 'highlights': empty_highlights()}
        return {
            'stats_history': self._decode_history(entry.get('stats_history')),
            'highlights': self._decode_highlights(entry.get('highlights')),
        }

    # ------------------------------------------------------------------
    # Active match
    # ------------------------------------------------------------------

    def open_match(self, match_id):
        """
        Switch the active match, loading its persisted state (or empty state)

        Args:
            match_id: Feed event identifier
        """
        match_key = str(match_id)
        if match_key == self.match_id:
            return

        state = self.load_match(match_key)
        self.match_id = match_key
        self.stats_history = state['stats_history']
        self.highlights = state['highlights']
        self.logger.info(
            f"Opened match {match_key}: {len(self.stats_history)} snapshots, "
            f"{len(self.highlights['over_under'])} highlights"
        )

    def _require_match(self):
        if self.match_id is None:
            raise RuntimeError("No active match; call open_match() first")

    def _regressed_against(self, minute: int, snapshot: Dict) -> Optional[int]:
        """
        Minute of a stored snapshot that `snapshot` contradicts, or None

        Counters must not fall below the nearest earlier minute. A write behind
        the latest recorded minute with counters below the nearest later one
        means the match clock restarted.
        """
        earlier = [m for m in self.stats_history if m < minute]
        if earlier and has_counter_regression(self.stats_history[max(earlier)], snapshot):
            return max(earlier)

        later = [m for m in self.stats_history if m > minute]
        if later and has_counter_regression(self.stats_history[min(later)], snapshot):
            return min(later)
        return None

    def record_snapshot(self, minute: int, snapshot: Dict):
        """
        Store the snapshot for a minute (last write wins) and persist

        A counter regression means the feed restarted; prior history is
        dropped when RESET_ON_COUNTER_REGRESSION is set.
        """
        self._require_match()

        conflicting = self._regressed_against(minute, snapshot)
        if conflicting is not None:
            self.logger.warning(
                f"Counter regression in match {self.match_id} at {minute}' "
                f"(against snapshot {conflicting}')"
            )
            if config.RESET_ON_COUNTER_REGRESSION:
                self.logger.warning(f"Resetting snapshot history for match {self.match_id}")
                self.stats_history = {}

        self.stats_history[minute] = snapshot
        self._persist_active()

    def add_highlight(self, highlight: Dict) -> bool:
        """
        Append a highlight to both views unless one already exists for its minute

        Returns:
            True if the highlight was added to at least one view
        """
        self._require_match()

        added = False
        for view in HIGHLIGHT_VIEWS:
            if any(h['minute'] == highlight['minute'] for h in self.highlights[view]):
                continue
            self.highlights[view].append(dict(highlight))
            added = True

        if added:
            self._persist_active()
        return added

    def sorted_highlights(self, view: str) -> List[Dict]:
        return sorted(self.highlights[view], key=lambda h: h['minute'])

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def cleanup_old_matches(self) -> int:
        """Remove matches not updated within the memory window"""
        current_time = datetime.now()
        expired_matches = []

        for match_id, entry in self.matches.items():
            if match_id == self.match_id:
                continue
            try:
                updated = datetime.fromisoformat(entry['updated_at'])
            except (KeyError, TypeError, ValueError):
                expired_matches.append(match_id)
                continue

            age_hours = (current_time - updated).total_seconds() / 3600
            if age_hours > config.MATCH_MEMORY_HOURS:
                expired_matches.append(match_id)

        for match_id in expired_matches:
            del self.matches[match_id]

        if expired_matches:
            self._save_database()

        return len(expired_matches)

    def get_statistics(self) -> Dict:
        """Get database statistics for monitoring"""
        return {
            'total_tracked': len(self.matches),
            'active_match': self.match_id,
            'snapshots': len(self.stats_history),
            'highlights': len(self.highlights['over_under']),
        }
