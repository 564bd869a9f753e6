"""
Goal Pattern Detector
Combines API momentum, odds "bubble" intensity and recent shot clusters into a
composite goal-likelihood score, classifies it and emits minute highlights
"""

import logging
import math
from typing import Dict, List, Optional
import config
from momentum import combined_api_score
from shot_events import counter_deltas
from trend_colorizer import RED

# Highlight level -> PreGoalAnalysis level
ANALYSIS_LEVELS = {
    None: 'low',
    'weak': 'medium',
    'medium': 'high',
    'strong': 'very-high',
}


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def normalize(value: float, ceiling: float) -> float:
    """Scale by an empirical ceiling into [0, 1]."""
    return clamp(value / (ceiling or 1))


def to_percent(score: float) -> int:
    """Round a 0-1 score to a whole percentage, halves rounding up."""
    return int(math.floor(score * 100 + 0.5))


class PatternDetector:
    """Heuristic pre-goal classifier over derived numeric features"""

    def __init__(self, **overrides):
        self.logger = logging.getLogger(__name__)

        self.min_minute = config.DETECTION_MIN_MINUTE
        self.momentum_window = config.MOMENTUM_WINDOW
        self.bubble_window = config.BUBBLE_WINDOW
        self.shot_window = config.SHOT_WINDOW
        self.api_ceiling = config.API_MOMENTUM_CEILING
        self.bubble_ceiling = config.BUBBLE_CEILING
        self.shot_ceiling = config.SHOT_CLUSTER_CEILING
        self.bubble_weight = config.BUBBLE_WEIGHT
        self.bubble_cluster_weight = config.BUBBLE_CLUSTER_WEIGHT
        self.on_target_weight = config.SHOT_ON_TARGET_WEIGHT
        self.off_target_weight = config.SHOT_OFF_TARGET_WEIGHT
        self.api_weight = config.COMPOSITE_API_WEIGHT
        self.bubble_score_weight = config.COMPOSITE_BUBBLE_WEIGHT
        self.shots_weight = config.COMPOSITE_SHOTS_WEIGHT
        self.weak_momentum = config.WEAK_MOMENTUM_THRESHOLD
        self.weak_momentum_damping = config.WEAK_MOMENTUM_DAMPING
        self.confluence_bubble = config.CONFLUENCE_BUBBLE_THRESHOLD
        self.confluence_api = config.CONFLUENCE_API_THRESHOLD
        self.confluence_bonus = config.CONFLUENCE_BONUS
        self.strong_level = config.STRONG_LEVEL
        self.medium_level = config.MEDIUM_LEVEL
        self.weak_level = config.WEAK_LEVEL

        for name, value in overrides.items():
            if not hasattr(self, name) or name == 'logger':
                raise TypeError(f"Unknown detector parameter: {name}")
            setattr(self, name, value)

    # ------------------------------------------------------------------
    # Feature extraction
    # ------------------------------------------------------------------

    def calculate_api_momentum(self, history: Dict[int, Dict], minute: int) -> float:
        """
        Combined API now minus combined API `momentum_window` minutes ago

        "Now" is the latest snapshot at or before `minute`; "ago" is the latest
        snapshot at or before minute - window, else the earliest snapshot.
        """
        minutes = sorted(history)
        if not minutes:
            return 0.0

        current = [m for m in minutes if m <= minute]
        current_total = combined_api_score(history[current[-1]]) if current else 0.0

        past = [m for m in minutes if m <= max(0, minute - self.momentum_window)]
        past_minute = past[-1] if past else minutes[0]
        past_total = combined_api_score(history[past_minute])

        return current_total - past_total

    def calculate_bubble_intensity(self, points: List[Dict], minute: int) -> float:
        """Weighted count of non-red or clustered points in the trailing window."""
        start = minute - self.bubble_window
        total = 0.0
        for point in points:
            if not start < point['minute'] <= minute:
                continue
            if point['cluster']:
                total += self.bubble_cluster_weight
            elif point['color'] != RED:
                total += self.bubble_weight
        return total

    def calculate_shot_cluster(self, history: Dict[int, Dict], minute: int) -> float:
        """Weighted new shots (counter deltas) in the trailing window."""
        start = minute - self.shot_window
        minutes = sorted(history)
        score = 0.0

        for prev_minute, current_minute in zip(minutes, minutes[1:]):
            if not start < current_minute <= minute:
                continue
            deltas = counter_deltas(history[prev_minute], history[current_minute])
            score += max(0, deltas['on']) * self.on_target_weight
            score += max(0, deltas['off']) * self.off_target_weight

        return score

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def composite_score(self, api_norm: float, bubble_norm: float, shots_norm: float) -> float:
        score = (
            self.api_weight * api_norm
            + self.bubble_score_weight * bubble_norm
            + self.shots_weight * shots_norm
        )

        # Momentum too weak to trust the market/shot signal alone
        if api_norm < self.weak_momentum:
            score *= self.weak_momentum_damping

        if bubble_norm > self.confluence_bubble and api_norm > self.confluence_api:
            score += self.confluence_bonus

        return clamp(score)

    def classify_level(self, score: float) -> Optional[str]:
        """Map a composite score to a highlight level (None = no emission)"""
        if score >= self.strong_level:
            return 'strong'
        elif score >= self.medium_level:
            return 'medium'
        elif score >= self.weak_level:
            return 'weak'
        return None

    def evaluate(self, minute: int, history: Dict[int, Dict],
                 over_points: List[Dict], home_points: List[Dict]) -> Dict:
        """
        Compute all features and the composite score for one minute

        Returns:
            Dict of raw features, normalized features, composite and level
        """
        api_momentum = self.calculate_api_momentum(history, minute)
        api_norm = normalize(api_momentum, self.api_ceiling)

        bubble_over = self.calculate_bubble_intensity(over_points, minute)
        bubble_home = self.calculate_bubble_intensity(home_points, minute)
        bubble = bubble_over + bubble_home
        bubble_norm = normalize(bubble, self.bubble_ceiling)

        shots = self.calculate_shot_cluster(history, minute)
        shots_norm = normalize(shots, self.shot_ceiling)

        composite = self.composite_score(api_norm, bubble_norm, shots_norm)

        return {
            'apiMomentum': round(api_momentum, 3),
            'apiNorm': round(api_norm, 3),
            'bubble': round(bubble, 3),
            'bubbleOver': round(bubble_over, 3),
            'bubbleHome': round(bubble_home, 3),
            'bubbleNorm': round(bubble_norm, 3),
            'shotCluster': round(shots, 3),
            'shotsNorm': round(shots_norm, 3),
            'composite': composite,
            'level': self.classify_level(composite),
        }

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def analyze(self, minute: Optional[int], history: Dict[int, Dict],
                over_points: List[Dict], home_points: List[Dict]) -> Dict:
        """Build the per-tick PreGoalAnalysis (never persisted)"""
        if not minute or minute < self.min_minute:
            return {
                'score': 0,
                'level': ANALYSIS_LEVELS[None],
                'factors': {
                    'apiMomentum': 0.0,
                    'apiNorm': 0.0,
                    'bubble': 0.0,
                    'bubbleNorm': 0.0,
                    'shotCluster': 0.0,
                    'shotsNorm': 0.0,
                    'pressure': 0.0,
                    'composite': 0.0,
                },
            }

        features = self.evaluate(minute, history, over_points, home_points)
        return {
            'score': to_percent(features['composite']),
            'level': ANALYSIS_LEVELS[features['level']],
            'factors': {
                'apiMomentum': features['apiMomentum'],
                'apiNorm': features['apiNorm'],
                'bubble': features['bubble'],
                'bubbleNorm': features['bubbleNorm'],
                'shotCluster': features['shotCluster'],
                'shotsNorm': features['shotsNorm'],
                'pressure': features['bubble'],
                'composite': round(features['composite'], 4),
            },
        }

    def detect(self, minute: Optional[int], history: Dict[int, Dict],
               over_points: List[Dict], home_points: List[Dict], store) -> Optional[Dict]:
        """
        Run detection for the current minute and merge any highlight into store

        Returns:
            The newly added highlight, or None
        """
        if not minute or minute < self.min_minute:
            return None

        features = self.evaluate(minute, history, over_points, home_points)
        level = features['level']
        if level is None:
            self.logger.debug(f"{minute}': composite {features['composite']:.3f} below threshold")
            return None

        highlight = {
            'minute': minute,
            'level': level,
            'label': f"{to_percent(features['composite'])}%",
        }

        if not store.add_highlight(highlight):
            self.logger.debug(f"{minute}': highlight already recorded")
            return None

        self.logger.info(
            f"Goal signal {highlight['label']} ({level}) at {minute}' "
            f"[api={features['apiNorm']:.2f} bubble={features['bubbleNorm']:.2f} "
            f"shots={features['shotsNorm']:.2f}]"
        )
        return highlight
