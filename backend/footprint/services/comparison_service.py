"""
Comparison service for emission records.

Architecture:
- Period comparisons: rolling windows against the window right before them
- Goal comparisons: period totals against personal targets
- Historical comparisons: rolling totals, percentile rank, all-time stats
- Performance: consistency and tracking frequency over the last 30 days

Every window is half-open and anchored on an explicit `now`.
"""

import math
from typing import Dict, Any, Optional, Sequence
from datetime import datetime

from footprint.services.analytics_base import (
    AnalyticsStatsCalculator,
    sum_values,
    average_value
)
from footprint.services.category_service import CategoryAggregator
from footprint.services.trend_service import TrendDetector
from footprint.utils.time_windows import (
    day_key,
    days_between,
    filter_days_back,
    get_days_remaining_in_period,
    group_by_period
)


DEFAULT_GOALS = {
    'daily_target': 5.0,
    'weekly_target': 35.0,
    'monthly_target': 150.0,
    'yearly_target': 1800.0,
    # % of the last 30 days' total
    'category_targets': {
        'Transport': 30,
        'Food': 25,
        'Energy': 20,
        'Housing': 15,
        'Consumption': 10,
    },
}

PERIOD_WINDOWS = {
    'weekly': 7,
    'monthly': 30,
    'quarterly': 90,
}

ROLLING_PERIODS = [7, 14, 30, 90]
PERCENTILE_POINTS = [10, 25, 50, 75, 90]
PERCENTILE_WEEKS_BACK = 12
PERCENTILE_MIN_RECORDS = 10
PERCENTILE_MIN_WEEKS = 4
PERFORMANCE_WINDOW_DAYS = 30
PROJECTION_WEEKS = 8


def resolve_goals(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Built-in goals with any configured overrides applied on top."""
    goals = dict(DEFAULT_GOALS)
    goals['category_targets'] = dict(DEFAULT_GOALS['category_targets'])
    if not overrides:
        return goals
    for key, value in overrides.items():
        if key == 'category_targets' and isinstance(value, dict):
            goals['category_targets'].update(value)
        else:
            goals[key] = value
    return goals


# ============================================================================
# INTERPRETATIONS
# ============================================================================

class ComparisonInterpreter:
    """Map raw numbers to the labels shown alongside comparisons."""

    @staticmethod
    def get_change_interpretation(change_percentage: Optional[float]) -> str:
        if change_percentage is None:
            return 'new_baseline'
        abs_change = abs(change_percentage)
        if abs_change < 5:
            return 'minimal_change'
        if abs_change < 15:
            return 'moderate_change'
        if abs_change < 30:
            return 'significant_change'
        return 'major_change'

    @staticmethod
    def get_percentile_interpretation(percentile: float) -> str:
        if percentile <= 25:
            return 'excellent'
        if percentile <= 50:
            return 'good'
        if percentile <= 75:
            return 'average'
        return 'needs_improvement'

    @staticmethod
    def get_consistency_interpretation(coefficient_of_variation: float) -> str:
        if coefficient_of_variation < 20:
            return 'very_consistent'
        if coefficient_of_variation < 40:
            return 'moderately_consistent'
        if coefficient_of_variation < 60:
            return 'somewhat_inconsistent'
        return 'highly_variable'

    @staticmethod
    def get_frequency_interpretation(frequency: float) -> str:
        if frequency >= 90:
            return 'excellent_tracking'
        if frequency >= 70:
            return 'good_tracking'
        if frequency >= 50:
            return 'moderate_tracking'
        return 'inconsistent_tracking'


def change_metrics(current_total: float, previous_total: float) -> Dict[str, Any]:
    """
    Change between two totals.

    A zero previous total with a positive current total has no meaningful
    percentage: `change_percentage` is None and `is_new_baseline` is True.
    """
    change = current_total - previous_total
    is_new_baseline = previous_total == 0 and current_total > 0

    if previous_total > 0:
        change_percentage = change / previous_total * 100
    elif is_new_baseline:
        change_percentage = None
    else:
        change_percentage = 0.0

    if change > 0:
        trend = 'increasing'
    elif change < 0:
        trend = 'decreasing'
    else:
        trend = 'stable'

    return {
        'change': change,
        'change_percentage': change_percentage,
        'is_new_baseline': is_new_baseline,
        'trend': trend,
        'interpretation': ComparisonInterpreter.get_change_interpretation(change_percentage),
    }


# ============================================================================
# PERIOD COMPARISONS
# ============================================================================

class PeriodComparator:

    @staticmethod
    def compare_periods(current: Sequence[Any], previous: Sequence[Any], period_name: str) -> Dict[str, Any]:
        current_total = sum_values(current)
        previous_total = sum_values(previous)

        return {
            'period': period_name,
            'current': {
                'total': current_total,
                'average': average_value(current),
                'activities': len(current),
            },
            'previous': {
                'total': previous_total,
                'average': average_value(previous),
                'activities': len(previous),
            },
            'comparison': change_metrics(current_total, previous_total),
        }

    @staticmethod
    def calculate_weekly_trend(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
        """Last 7 days against the 7 days before them."""
        this_week = sum_values(filter_days_back(records, now, 7))
        last_week = sum_values(filter_days_back(records, now, 7, offset_days=7))

        metrics = change_metrics(this_week, last_week)
        return {
            'current_week': this_week,
            'previous_week': last_week,
            'change': metrics['change'],
            'change_percentage': metrics['change_percentage'],
            'is_new_baseline': metrics['is_new_baseline'],
            'trend': metrics['trend'],
        }

    @staticmethod
    def calculate_time_period_comparisons(records: Sequence[Any], now: datetime) -> Dict[str, Dict[str, Any]]:
        comparisons = {}
        for period_name, days in PERIOD_WINDOWS.items():
            current = filter_days_back(records, now, days)
            previous = filter_days_back(records, now, days, offset_days=days)
            comparisons[period_name] = PeriodComparator.compare_periods(current, previous, period_name)
        return comparisons

    @staticmethod
    def calculate_category_comparisons(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
        """Week-over-week change for every category seen in either week."""
        this_week = CategoryAggregator.calculate_category_totals(filter_days_back(records, now, 7))
        last_week = CategoryAggregator.calculate_category_totals(
            filter_days_back(records, now, 7, offset_days=7))

        categories = list(this_week)
        categories.extend(c for c in last_week if c not in this_week)

        by_category = []
        for category in categories:
            current = this_week.get(category, 0.0)
            previous = last_week.get(category, 0.0)
            metrics = change_metrics(current, previous)
            by_category.append({
                'category': category,
                'current': current,
                'previous': previous,
                **metrics,
            })

        most_changed = sorted(by_category, key=lambda c: abs(c['change']), reverse=True)[:3]

        return {
            'by_category': by_category,
            'most_changed': most_changed,
            'improving_categories': [c for c in by_category if c['trend'] == 'decreasing'],
            'worsening_categories': [c for c in by_category if c['trend'] == 'increasing'],
        }


# ============================================================================
# GOAL COMPARISONS
# ============================================================================

class GoalComparator:

    @staticmethod
    def compare_to_goal(actual: float, target: float, period: str, now: datetime) -> Dict[str, Any]:
        if actual <= target:
            status = 'on_track'
        elif actual <= target * 1.1:
            status = 'close'
        else:
            status = 'over_target'

        return {
            'period': period,
            'target': target,
            'actual': actual,
            'difference': actual - target,
            'percentage_of_target': (actual / target * 100) if target > 0 else 0.0,
            'status': status,
            'days_remaining': get_days_remaining_in_period(period, now),
        }

    @staticmethod
    def project_weekly_goal(records: Sequence[Any], now: datetime, target: float) -> Dict[str, Any]:
        """Weeks needed to reach `target` at the slope of recent rolling weekly totals."""
        weekly_totals = [
            sum_values(filter_days_back(records, now, 7, offset_days=i * 7))
            for i in reversed(range(PROJECTION_WEEKS))
        ]
        trend = TrendDetector.detect_trend(weekly_totals)
        return TrendDetector.calculate_goal_progress(weekly_totals[-1], target, trend)

    @staticmethod
    def calculate_personal_goal_comparisons(
        records: Sequence[Any],
        now: datetime,
        goals: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Compare recent totals with personal targets.

        Daily actual is the last 7 days' total divided by the number of days
        in that window that have at least one record.
        """
        goals = resolve_goals(goals)

        weekly_records = filter_days_back(records, now, 7)
        monthly_records = filter_days_back(records, now, 30)
        yearly_records = filter_days_back(records, now, 365)

        weekly_total = sum_values(weekly_records)
        monthly_total = sum_values(monthly_records)
        yearly_total = sum_values(yearly_records)

        days_with_data = len({day_key(r.timestamp) for r in weekly_records})
        daily_average = weekly_total / days_with_data if days_with_data > 0 else 0.0

        category_totals = CategoryAggregator.calculate_category_totals(monthly_records)
        category_targets = []
        for category, target in goals['category_targets'].items():
            share = (category_totals.get(category, 0.0) / monthly_total * 100) if monthly_total > 0 else 0.0
            category_targets.append({
                'category': category,
                'target': target,
                'actual': share,
                'difference': share - target,
                'status': 'on_track' if share <= target else 'over_target',
            })

        weekly = GoalComparator.compare_to_goal(weekly_total, goals['weekly_target'], 'weekly', now)
        weekly['projection'] = GoalComparator.project_weekly_goal(records, now, goals['weekly_target'])

        return {
            'daily': GoalComparator.compare_to_goal(daily_average, goals['daily_target'], 'daily', now),
            'weekly': weekly,
            'monthly': GoalComparator.compare_to_goal(monthly_total, goals['monthly_target'], 'monthly', now),
            'yearly': GoalComparator.compare_to_goal(yearly_total, goals['yearly_target'], 'yearly', now),
            'category_targets': category_targets,
        }


# ============================================================================
# HISTORICAL COMPARISONS
# ============================================================================

class HistoricalComparator:

    @staticmethod
    def calculate_rolling_averages(records: Sequence[Any], now: datetime) -> Dict[str, Dict[str, Any]]:
        rolling = {}
        for days in ROLLING_PERIODS:
            window = filter_days_back(records, now, days)
            rolling[f'{days}day'] = {
                'period': f'{days} days',
                'total': sum_values(window),
                'average': average_value(window),
                'activities': len(window),
            }
        return rolling

    @staticmethod
    def calculate_percentile_rankings(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
        """
        Rank the last 7 days' total among the last 12 rolling weekly totals.

        Empty weeks are left out of the distribution.
        """
        if len(records) < PERCENTILE_MIN_RECORDS:
            return {
                'has_enough_data': False,
                'message': f'Need at least {PERCENTILE_MIN_RECORDS} data points for percentile analysis',
            }

        weekly_totals = []
        for i in range(PERCENTILE_WEEKS_BACK):
            week = filter_days_back(records, now, 7, offset_days=i * 7)
            if week:
                weekly_totals.append(sum_values(week))

        if len(weekly_totals) < PERCENTILE_MIN_WEEKS:
            return {
                'has_enough_data': False,
                'message': f'Need at least {PERCENTILE_MIN_WEEKS} weeks of data for percentile analysis',
            }

        current_week_total = sum_values(filter_days_back(records, now, 7))
        sorted_weekly = sorted(weekly_totals)

        percentiles = [
            {'percentile': p, 'value': AnalyticsStatsCalculator.calculate_percentile(sorted_weekly, p)}
            for p in PERCENTILE_POINTS
        ]
        current_percentile = AnalyticsStatsCalculator.calculate_current_percentile(
            current_week_total, sorted_weekly)

        return {
            'has_enough_data': True,
            'current_week': current_week_total,
            'current_percentile': current_percentile,
            'percentiles': percentiles,
            'interpretation': ComparisonInterpreter.get_percentile_interpretation(current_percentile),
        }

    @staticmethod
    def calculate_all_time_statistics(records: Sequence[Any]) -> Optional[Dict[str, Any]]:
        if not records:
            return None

        values = [float(r.value) for r in records]
        sorted_values = sorted(values)
        total = sum(values)

        timestamps = [r.timestamp for r in records]
        earliest = min(timestamps)
        latest = max(timestamps)
        total_days = math.ceil(days_between(earliest, latest)) + 1

        return {
            'total': total,
            'average': total / len(values),
            'median': AnalyticsStatsCalculator.calculate_percentile(sorted_values, 50),
            'min': sorted_values[0],
            'max': sorted_values[-1],
            'total_activities': len(values),
            'date_range': {
                'earliest': earliest,
                'latest': latest,
                'total_days': total_days,
            },
            'daily_average': total / total_days,
        }

    @staticmethod
    def calculate_historical_comparisons(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
        if not records:
            return {
                'has_data': False,
                'message': 'Not enough historical data for comparison',
            }

        return {
            'has_data': True,
            'rolling_averages': HistoricalComparator.calculate_rolling_averages(records, now),
            'percentile_rankings': HistoricalComparator.calculate_percentile_rankings(records, now),
            'all_time_stats': HistoricalComparator.calculate_all_time_statistics(records),
        }


# ============================================================================
# PERFORMANCE
# ============================================================================

def calculate_performance_metrics(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
    recent = filter_days_back(records, now, PERFORMANCE_WINDOW_DAYS)
    if not recent:
        return {
            'has_data': False,
            'message': 'No recent data for performance analysis',
        }

    daily_totals = [sum_values(day) for day in group_by_period(recent, 'day').values()]
    variation = AnalyticsStatsCalculator.coefficient_of_variation(daily_totals)

    total_days = PERFORMANCE_WINDOW_DAYS
    active_days = len(daily_totals)
    tracking_frequency = active_days / total_days * 100

    return {
        'has_data': True,
        'consistency': {
            **variation,
            'interpretation': ComparisonInterpreter.get_consistency_interpretation(
                variation['coefficient_of_variation']),
        },
        'frequency': {
            'total_days': total_days,
            'active_days': active_days,
            'tracking_frequency': tracking_frequency,
            'interpretation': ComparisonInterpreter.get_frequency_interpretation(tracking_frequency),
        },
    }


def compute_comparisons(
    records: Sequence[Any],
    now: datetime,
    goals: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Bundle period, goal, category, historical and performance comparisons."""
    return {
        'time_periods': PeriodComparator.calculate_time_period_comparisons(records, now),
        'personal_goals': GoalComparator.calculate_personal_goal_comparisons(records, now, goals),
        'categories': PeriodComparator.calculate_category_comparisons(records, now),
        'historical': HistoricalComparator.calculate_historical_comparisons(records, now),
        'performance': calculate_performance_metrics(records, now),
        'generated_at': now,
    }
