"""
B365 in-play feed client with retry/backoff
Fetches match snapshots and odds history; failures mean "no update this tick"
"""

import copy
import requests
import time
import logging
from typing import Dict, List, Optional
import config


DEMO_MATCHES = [
    {
        'id': '1',
        'league': {'name': 'Premier League - Demo'},
        'home': {'name': 'Manchester United'},
        'away': {'name': 'Liverpool'},
        'ss': '1-1',
        'time': '65',
        'timer': {'tm': 65, 'ts': 0, 'tt': '1', 'ta': 0, 'md': 0},
        'stats': {
            'attacks': ['60', '75'],
            'dangerous_attacks': ['35', '50'],
            'on_target': ['5', '8'],
            'off_target': ['4', '6'],
            'corners': ['3', '5'],
            'yellowcards': ['1', '2'],
            'redcards': ['0', '0'],
        },
    },
    {
        'id': '2',
        'league': {'name': 'La Liga - Demo'},
        'home': {'name': 'Real Madrid'},
        'away': {'name': 'Barcelona'},
        'ss': '2-0',
        'time': '78',
        'timer': {'tm': 78, 'ts': 0, 'tt': '1', 'ta': 0, 'md': 0},
        'stats': {
            'attacks': ['80', '50'],
            'dangerous_attacks': ['60', '25'],
            'on_target': ['10', '2'],
            'off_target': ['7', '3'],
            'corners': ['8', '1'],
            'yellowcards': ['0', '3'],
            'redcards': ['0', '0'],
        },
    },
]

DEMO_ODDS = {
    'success': 1,
    'results': {
        'odds': {
            config.HOME_AWAY_MARKET: [],
            config.TOTALS_MARKET: [
                {'id': '1', 'over_od': '1.85', 'under_od': '1.95', 'handicap': '2.5',
                 'time_str': '0', 'add_time': '0'},
            ],
        }
    },
}


def is_excluded_league(event: Dict) -> bool:
    """Virtual/e-sport leagues carry no real in-play signal"""
    league = event.get('league') or {}
    name = str(league.get('name') or '').lower()
    if not name:
        return True
    return any(keyword in name for keyword in config.EXCLUDED_LEAGUE_KEYWORDS)


class B365Client:
    """Client for the B365 in-play and odds endpoints"""

    def __init__(self, token: str = config.B365_TOKEN, proxy_url: str = config.B365_PROXY_URL):
        self.token = token
        self.proxy_url = proxy_url
        self.session = requests.Session()
        self.logger = logging.getLogger(__name__)

    @property
    def demo_mode(self) -> bool:
        return self.token == config.DEMO_TOKEN

    def _build_request(self, url: str, params: Dict):
        if not self.proxy_url:
            return url, params
        # Relay expects the full upstream URL in ?target=
        target = requests.Request('GET', url, params=params).prepare().url
        return self.proxy_url, {'target': target}

    def _make_request(self, url: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """
        Make API request with retry logic and error handling

        Args:
            url: Upstream endpoint URL
            params: Query parameters (token added automatically)

        Returns:
            JSON response or None on failure
        """
        if not self.token:
            self.logger.warning("No B365 token configured, request skipped")
            return None

        query = dict(params or {})
        query['token'] = self.token
        request_url, request_params = self._build_request(url, query)

        for attempt in range(config.MAX_RETRIES):
            try:
                response = self.session.get(
                    request_url,
                    params=request_params,
                    timeout=config.REQUEST_TIMEOUT
                )

                if response.status_code == 200:
                    if not response.text or not response.text.strip():
                        self.logger.warning(f"Empty response from {url}")
                        return None
                    try:
                        return response.json()
                    except ValueError as e:
                        self.logger.error(f"Invalid JSON response: {e}")
                        return None

                elif response.status_code == 429:  # Rate limited
                    wait_time = config.RETRY_BACKOFF_FACTOR ** (attempt + 1)
                    self.logger.warning(f"Rate limited, waiting {wait_time}s")
                    time.sleep(wait_time)

                elif response.status_code == 403:
                    self.logger.error("Access denied (403): check the token or proxy")
                    return None

                else:
                    self.logger.error(f"API error {response.status_code}: {response.text}")
                    return None

            except requests.Timeout:
                self.logger.error(f"Request timeout on attempt {attempt + 1}")
                if attempt < config.MAX_RETRIES - 1:
                    time.sleep(config.RETRY_BACKOFF_FACTOR ** attempt)

            except requests.RequestException as e:
                self.logger.error(f"Request failed: {str(e)}")
                return None

        return None

    @staticmethod
    def _is_success(data: Dict) -> bool:
        return data.get('success') in (1, '1')

    def get_inplay_events(self) -> List[Dict]:
        """
        Fetch all in-play soccer events (e-soccer filtered out)

        Returns:
            List of MatchSnapshot dictionaries
        """
        if self.demo_mode:
            return copy.deepcopy(DEMO_MATCHES)

        data = self._make_request(config.B365_INPLAY_URL, {'sport_id': config.B365_SPORT_ID})
        if not data:
            return []

        if not self._is_success(data):
            self.logger.error(f"In-play request failed: {data.get('error', 'unknown error')}")
            return []

        results = data.get('results') or []
        return [event for event in results if isinstance(event, dict) and not is_excluded_league(event)]

    def get_match_details(self, event_id) -> Optional[Dict]:
        """
        Get the live snapshot for one event

        Args:
            event_id: Feed event id

        Returns:
            MatchSnapshot or None
        """
        if not event_id:
            return None

        for event in self.get_inplay_events():
            if str(event.get('id')) == str(event_id):
                return event

        self.logger.debug(f"Event {event_id} not in the in-play list")
        return None

    def get_match_odds(self, event_id) -> Optional[Dict]:
        """
        Get the odds history payload for one event

        Args:
            event_id: Feed event id

        Returns:
            OddsSnapshot or None
        """
        if self.demo_mode:
            return copy.deepcopy(DEMO_ODDS)

        if not event_id:
            return None

        data = self._make_request(config.B365_ODDS_URL, {'event_id': event_id})
        if not data:
            return None

        if not self._is_success(data):
            self.logger.warning(f"Odds request failed for event {event_id}: {data.get('error', 'unknown error')}")
            return None

        return data
