"""
Anti-emotion entry checklist
Read-only evaluation over the current analysis and parsed stats
"""

from typing import Dict, Optional
import config
from stats_parser import combined

MANUAL_CHECKS = ('consistentPressure', 'waitConfirm', 'manualEmotion')


def evaluate_checklist(analysis: Dict, stats: Optional[Dict],
                       manual: Optional[Dict[str, bool]] = None) -> Dict:
    """
    Evaluate automatic checks and merge the user's manual confirmations

    Args:
        analysis: PreGoalAnalysis from PatternDetector.analyze
        stats: latest parsed StatsSnapshot
        manual: manual check name -> bool (unset checks count as unchecked)

    Returns:
        {'auto': {...}, 'manual': {...}, 'allPassed': bool}
    """
    manual = manual or {}
    factors = analysis.get('factors', {})

    auto_checks = {
        'apiTrend': factors.get('apiMomentum', 0) > config.CHECKLIST_API_MOMENTUM,
        'onTarget': combined(stats, 'on_target') > 0,
        'highProb': analysis.get('score', 0) > config.CHECKLIST_HIGH_PROBABILITY,
    }
    manual_checks = {name: bool(manual.get(name, False)) for name in MANUAL_CHECKS}

    return {
        'auto': auto_checks,
        'manual': manual_checks,
        'allPassed': all(auto_checks.values()) and all(manual_checks.values()),
    }
