"""
Live Match Poller
Drives the analysis pipeline on a fixed interval with a cancellable wait
"""

import threading
import logging
from datetime import datetime
from typing import Dict, Optional
import config
from api_client import B365Client
from pipeline import MatchPipeline


class MatchPoller:
    """Polling driver for one followed match"""

    def __init__(self, client: B365Client, pipeline: MatchPipeline,
                 match_id=None, interval: int = config.POLL_INTERVAL):
        self.client = client
        self.pipeline = pipeline
        self.match_id = str(match_id) if match_id is not None else None
        self.interval = max(int(interval), config.MIN_POLL_INTERVAL)
        self.logger = logging.getLogger(__name__)

        self._stop_event = threading.Event()
        self.tick_count = 0
        self.last_result: Optional[Dict] = None
        self.start_time = datetime.now()

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def switch_match(self, match_id):
        """Follow another match; its persisted state replaces the current one"""
        self.match_id = str(match_id)
        self.pipeline.open_match(self.match_id)
        self.last_result = None
        self.logger.info(f"Now following match {self.match_id}")

    def poll_once(self) -> Optional[Dict]:
        """
        Fetch one match/odds snapshot pair and run it through the pipeline

        Returns:
            Pipeline result, or None when the feed had no update this tick
        """
        if not self.match_id:
            self.logger.warning("No match selected, tick skipped")
            return None

        self.tick_count += 1
        match = self.client.get_match_details(self.match_id)
        odds = self.client.get_match_odds(self.match_id)

        if not match:
            self.logger.info(f"Tick #{self.tick_count}: no match update for {self.match_id}")
            return None

        if str(match.get('id')) != self.match_id:
            self.logger.warning(f"Feed returned event {match.get('id')} for {self.match_id}, ignored")
            return None

        result = self.pipeline.process_tick(match, odds)
        self.last_result = result

        if result:
            analysis = result['analysis']
            self.logger.info(
                f"Tick #{self.tick_count}: {result['minute']}' {result['score']} | "
                f"goal probability {analysis['score']}% ({analysis['level']}) | "
                f"highlights {len(result['highlights']['over_under'])}"
            )
        return result

    def run(self):
        """
        Main polling loop
        Runs until stop() is called; each tick completes before the next is scheduled
        """
        self.logger.info(f"Starting poller for match {self.match_id} every {self.interval}s")
        self._stop_event.clear()

        try:
            while not self._stop_event.is_set():
                try:
                    self.poll_once()
                except Exception as e:
                    self.logger.error(f"Error in poll cycle: {str(e)}", exc_info=True)

                self._stop_event.wait(self.interval)

        except KeyboardInterrupt:
            self.logger.info("Poller stopped by user")

        uptime = (datetime.now() - self.start_time).total_seconds() / 60
        self.logger.info(f"Poller stopped after {self.tick_count} ticks ({uptime:.1f} min)")

    def stop(self):
        """Cancel the scheduled wait and end the loop"""
        self._stop_event.set()
