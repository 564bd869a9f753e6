"""
Configuration settings for the Live Goal-Signal Analysis System
"""

import os

from dotenv import load_dotenv

load_dotenv()

# B365 Feed Configuration
B365_TOKEN = os.getenv("B365_TOKEN", "")
B365_PROXY_URL = os.getenv("B365_PROXY_URL", "")  # Optional relay, receives ?target=<url>
B365_INPLAY_URL = "https://api.b365api.com/v3/events/inplay"
B365_ODDS_URL = "https://api.b365api.com/v2/event/odds"
B365_SPORT_ID = 1  # Soccer
DEMO_TOKEN = "DEMO_MODE"
EXCLUDED_LEAGUE_KEYWORDS = ["esoccer"]

# Odds market keys in the feed payload
TOTALS_MARKET = "1_3"  # over/under goals
HOME_AWAY_MARKET = "1_2"  # asian handicap home/away

# Polling Configuration
POLL_INTERVAL = 20  # seconds between ticks
MIN_POLL_INTERVAL = 20  # upstream relay allows 1 request / 20s

# Retry Configuration
MAX_RETRIES = 3
RETRY_BACKOFF_FACTOR = 2  # Exponential: 2, 4, 8 seconds
REQUEST_TIMEOUT = 10  # seconds

# API (attacking pressure index) weights
API_SHOT_WEIGHT = 1.0
API_ON_TARGET_WEIGHT = 3.0
API_CORNER_WEIGHT = 0.7
API_DANGEROUS_ATTACK_WEIGHT = 0.1

# Trend colorizer
TREND_EPSILON = 0.02  # odds move treated as "stable"
CLUSTER_MIN_RUN = 3  # points in a bubble cluster
CLUSTER_SPAN_MINUTES = 5  # last.minute - first.minute must stay below this

# Pattern detector
DETECTION_MIN_MINUTE = 10  # no signal before this minute
MOMENTUM_WINDOW = 5  # minutes back for API momentum
BUBBLE_WINDOW = 3  # trailing minutes for bubble intensity
SHOT_WINDOW = 5  # trailing minutes for shot cluster
API_MOMENTUM_CEILING = 8.0
BUBBLE_CEILING = 8.0
SHOT_CLUSTER_CEILING = 6.0
BUBBLE_WEIGHT = 1.0
BUBBLE_CLUSTER_WEIGHT = 1.6
SHOT_ON_TARGET_WEIGHT = 3.0
SHOT_OFF_TARGET_WEIGHT = 1.0

# Composite score
COMPOSITE_API_WEIGHT = 0.20
COMPOSITE_BUBBLE_WEIGHT = 0.55
COMPOSITE_SHOTS_WEIGHT = 0.25
WEAK_MOMENTUM_THRESHOLD = 0.15  # apiNorm below this dampens the score
WEAK_MOMENTUM_DAMPING = 0.4
CONFLUENCE_BUBBLE_THRESHOLD = 0.6
CONFLUENCE_API_THRESHOLD = 0.5
CONFLUENCE_BONUS = 0.15

# Highlight levels
STRONG_LEVEL = 0.78  # >=78% = strong
MEDIUM_LEVEL = 0.62  # >=62% = medium
WEAK_LEVEL = 0.45  # >=45% = weak

# Checklist
CHECKLIST_API_MOMENTUM = 0.5
CHECKLIST_HIGH_PROBABILITY = 65

# Match History Persistence
RESET_ON_COUNTER_REGRESSION = True  # cumulative counters dropping = new match/reset
MATCH_MEMORY_HOURS = 24
DATABASE_FILE = "match_history.json"
LOG_FILE = "goal_signal.log"
ERROR_LOG_FILE = "errors.log"
