"""
Trend detection over ordered period totals.

One detector is used everywhere a trend is reported (weekly totals,
per-category weekly totals, monthly totals): an ordinary least squares
fit of value against its 1-based position.
"""

import math
from typing import Any, Dict, Sequence

import numpy as np
from scipy import stats


STABLE_SLOPE_THRESHOLD = 0.1


class TrendDetector:

    @staticmethod
    def detect_trend(values: Sequence[float], min_data_points: int = 3) -> Dict[str, Any]:
        """
        Classify a series as increasing, decreasing or stable.

        Returns trend, slope, intercept, correlation, confidence (|r| * 100),
        p_value and a readable message. Series shorter than `min_data_points`
        return `insufficient_data` with zero confidence.
        """
        if values is None or len(values) < min_data_points:
            return {
                'trend': 'insufficient_data',
                'confidence': 0,
                'message': f'Need at least {min_data_points} data points for trend analysis',
            }

        y_values = np.array(values, dtype=float)
        x_values = np.arange(1, len(y_values) + 1, dtype=float)

        if np.ptp(y_values) == 0:
            # linregress cannot correlate a flat series
            slope, intercept, r_value, p_value = 0.0, float(y_values[0]), 0.0, 1.0
        else:
            result = stats.linregress(x_values, y_values)
            slope = float(result.slope)
            intercept = float(result.intercept)
            r_value = float(result.rvalue)
            p_value = float(result.pvalue)
            if math.isnan(r_value):
                r_value = 0.0
            if math.isnan(p_value):
                p_value = 1.0

        if abs(slope) < STABLE_SLOPE_THRESHOLD:
            trend = 'stable'
        elif slope > 0:
            trend = 'increasing'
        else:
            trend = 'decreasing'

        confidence = abs(r_value) * 100

        return {
            'trend': trend,
            'slope': slope,
            'intercept': intercept,
            'correlation': r_value,
            'confidence': confidence,
            'p_value': p_value,
            'message': TrendDetector.trend_message(trend, confidence),
        }

    @staticmethod
    def trend_message(trend: str, confidence: float) -> str:
        if confidence > 80:
            level = 'strong'
        elif confidence > 60:
            level = 'moderate'
        else:
            level = 'weak'

        if trend == 'increasing':
            return f'{level} upward trend - emissions are increasing'
        if trend == 'decreasing':
            return f'{level} downward trend - emissions are decreasing'
        if trend == 'stable':
            return f'{level} stable trend - emissions are relatively constant'
        return 'Insufficient data for trend analysis'

    @staticmethod
    def calculate_goal_progress(current: float, target: float, trend: Dict[str, Any]) -> Dict[str, Any]:
        """
        Project how many weeks the current downward slope needs to reach `target`.
        """
        slope = trend.get('slope', 0) or 0
        if trend.get('trend') == 'increasing' or slope >= 0:
            return {
                'achievable': False,
                'message': 'Current trend is not leading toward goal achievement',
                'recommendation': 'Consider implementing more aggressive reduction strategies',
            }

        reduction_rate = abs(slope)
        remaining_reduction = current - target

        if remaining_reduction <= 0:
            return {
                'achievable': True,
                'achieved': True,
                'message': 'Goal already achieved!',
            }

        weeks_to_goal = math.ceil(remaining_reduction / reduction_rate)
        return {
            'achievable': True,
            'achieved': False,
            'weeks_to_goal': weeks_to_goal,
            'message': f'At current rate, goal will be achieved in approximately {weeks_to_goal} weeks',
            'current_rate': reduction_rate,
            'remaining_reduction': remaining_reduction,
        }


detect_trend = TrendDetector.detect_trend
