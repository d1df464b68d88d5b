"""
Insights over a user's emission records.

Builds the achievement / warning / milestone / celebration / notification
feed, the carbon score, time-bucketed trend data and day-of-week and
seasonal patterns, and bundles them into one insights report.
"""

import math
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional, Sequence

from footprint.services.analytics_base import (
    AnalyticsGrouper,
    AnalyticsStatsCalculator,
    average_value,
    sum_values
)
from footprint.services.category_service import CategoryAggregator
from footprint.services.comparison_service import (
    GoalComparator,
    PeriodComparator,
    change_metrics
)
from footprint.services.recommendation_service import (
    calculate_improvement_patterns,
    calculate_weekday_weekend_comparison,
    compute_recommendations
)
from footprint.services.trend_service import TrendDetector
from footprint.utils.time_windows import (
    DAY_NAMES,
    SEASONS,
    add_months,
    day_name,
    days_between,
    filter_by_date_range,
    filter_days_back,
    filter_same_day,
    get_season,
    group_by_period,
    js_weekday,
    month_key,
    week_key,
    week_start
)


GLOBAL_WEEKLY_AVERAGE = 35.0

STREAK_LOOKBACK_DAYS = 30
STREAK_ACHIEVEMENT_MIN = 3
STREAK_CELEBRATIONS = [7, 14, 30, 60, 100]

LOW_IMPACT_DAY_LIMIT = 3.0
HIGH_IMPACT_DAY_LIMIT = 10.0

ACTIVITY_MILESTONES = [10, 25, 50, 100, 250, 500, 1000]
NEXT_ACTIVITY_MILESTONES = [5, 10, 25, 50, 100, 250, 500, 1000]
TRACKING_DAY_MILESTONES = [7, 30, 60, 100, 200, 365]
REDUCTION_MILESTONES = [10, 25, 50, 75]
ECO_WARRIOR_WEEKLY_AVERAGE = 25.0


def _by_day_totals(records: Sequence[Any]) -> Dict[str, float]:
    return {key: sum_values(group) for key, group in group_by_period(records, 'day').items()}


# ============================================================================
# TRACKING HABITS
# ============================================================================

def calculate_logging_streak(records: Sequence[Any], now: datetime,
                             lookback_days: int = STREAK_LOOKBACK_DAYS) -> int:
    """Consecutive calendar days, ending today, with at least one record."""
    logged_days = {r.timestamp.date() for r in records}
    today = now.date()

    streak = 0
    for offset in range(lookback_days):
        if today - timedelta(days=offset) in logged_days:
            streak += 1
        else:
            break
    return streak


def get_days_since_last_log(records: Sequence[Any], now: datetime) -> Optional[int]:
    if not records:
        return None
    last_log = max(r.timestamp for r in records)
    return math.floor(days_between(last_log, now))


def get_weekly_stats(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
    week = filter_days_back(records, now, 7)
    return {'activities': len(week), 'total': sum_values(week)}


# ============================================================================
# SCORE & CONSISTENCY
# ============================================================================

def calculate_carbon_score(weekly_emissions: float, global_average: float = GLOBAL_WEEKLY_AVERAGE) -> int:
    """
    0-100 score that falls as weekly emissions rise.

    Half the global average or less scores 90-100, the global average
    scores 50 and twice the global average scores 20.
    """
    if weekly_emissions <= 0:
        return 100

    ratio = weekly_emissions / global_average
    if ratio <= 0.5:
        score = 100 - ratio * 20
    elif ratio <= 1.0:
        score = 90 - (ratio - 0.5) * 80
    elif ratio <= 2.0:
        score = 50 - (ratio - 1.0) * 30
    else:
        score = max(0, 20 - (ratio - 2.0) * 10)

    return int(round(max(0, min(100, score))))


def get_score_interpretation(score: int) -> Dict[str, str]:
    if score >= 90:
        return {'level': 'excellent', 'message': 'Outstanding carbon performance!', 'color': 'green'}
    if score >= 75:
        return {'level': 'good', 'message': 'Good carbon performance', 'color': 'blue'}
    if score >= 60:
        return {'level': 'fair', 'message': 'Fair carbon performance', 'color': 'yellow'}
    if score >= 40:
        return {'level': 'poor', 'message': 'Below average carbon performance', 'color': 'orange'}
    return {'level': 'critical', 'message': 'High carbon footprint - needs improvement', 'color': 'red'}


def get_consistency_metrics(records: Sequence[Any]) -> Dict[str, Any]:
    daily_totals = list(_by_day_totals(records).values())
    if not daily_totals:
        return {'consistency': 0, 'message': 'No data'}

    variation = AnalyticsStatsCalculator.coefficient_of_variation(daily_totals)
    cv = variation['coefficient_of_variation']

    if cv < 25:
        consistency = 'Very Consistent'
    elif cv < 50:
        consistency = 'Moderately Consistent'
    elif cv < 75:
        consistency = 'Variable'
    else:
        consistency = 'Highly Variable'

    return {
        'consistency': consistency,
        'coefficient_of_variation': cv,
        'standard_deviation': variation['standard_deviation'],
        'message': f'Your daily emissions are {consistency.lower()}',
    }


# ============================================================================
# TIME-BUCKETED DATA
# ============================================================================

def get_weekly_trend_data(records: Sequence[Any], now: datetime, weeks: int = 12) -> List[Dict[str, Any]]:
    """One entry per calendar week (Sunday start) for the last `weeks` weeks, oldest first."""
    weekly_totals = AnalyticsGrouper.calculate_group_totals(group_by_period(records, 'week'))

    data = []
    for i in range(weeks - 1, -1, -1):
        start = week_start(now - timedelta(days=7 * i))
        bucket = weekly_totals.get(week_key(start), {'total': 0.0, 'count': 0, 'average': 0.0})
        data.append({
            'week': f'Week {weeks - i}',
            'start_date': start,
            'total': bucket['total'],
            'activities': bucket['count'],
            'average': bucket['average'],
        })
    return data


def get_monthly_trend_data(records: Sequence[Any], now: datetime, months: int = 6) -> List[Dict[str, Any]]:
    monthly_totals = AnalyticsGrouper.calculate_group_totals(group_by_period(records, 'month'))

    data = []
    for i in range(months - 1, -1, -1):
        start = add_months(now, -i)
        bucket = monthly_totals.get(month_key(start), {'total': 0.0, 'count': 0, 'average': 0.0})
        data.append({
            'month': start.strftime('%b %Y'),
            'start_date': start,
            'total': bucket['total'],
            'activities': bucket['count'],
            'average': bucket['average'],
        })
    return data


def calculate_monthly_trend(records: Sequence[Any], now: datetime, months: int = 6) -> List[Dict[str, Any]]:
    """Month-over-month change for the last `months` calendar months, oldest first."""
    trend = []
    previous_total = None
    for i in range(months - 1, -1, -1):
        start = add_months(now, -i)
        month_records = filter_by_date_range(records, start, add_months(start, 1))
        total = sum_values(month_records)

        entry = {
            'month': start.strftime('%B %Y'),
            'total': total,
            'activities': len(month_records),
            'average': average_value(month_records),
        }
        if previous_total is None:
            entry.update({'change': 0.0, 'change_percentage': 0.0, 'trend': 'stable'})
        else:
            metrics = change_metrics(total, previous_total)
            entry.update({
                'change': metrics['change'],
                'change_percentage': metrics['change_percentage'],
                'trend': metrics['trend'],
            })
        trend.append(entry)
        previous_total = total
    return trend


def get_weekly_average(records: Sequence[Any], now: datetime) -> float:
    """Average total over the last 4 calendar weeks, empty weeks included."""
    if not records:
        return 0.0
    weekly = get_weekly_trend_data(records, now, 4)
    return sum(week['total'] for week in weekly) / len(weekly)


# ============================================================================
# PATTERNS
# ============================================================================

def get_daily_patterns(records: Sequence[Any]) -> Dict[str, Any]:
    """Average daily total per day of week, and how weekends compare to weekdays."""
    per_weekday = {name: [] for name in DAY_NAMES}
    for group in group_by_period(records, 'day').values():
        per_weekday[day_name(group[0].timestamp)].append(sum_values(group))

    day_averages = {
        name: (sum(totals) / len(totals) if totals else 0.0)
        for name, totals in per_weekday.items()
    }

    weekday_average = sum(day_averages[d] for d in DAY_NAMES[1:6]) / 5
    weekend_average = (day_averages['Saturday'] + day_averages['Sunday']) / 2

    ranked = sorted(day_averages.items(), key=lambda item: item[1], reverse=True)
    return {
        'day_averages': day_averages,
        'weekday_average': weekday_average,
        'weekend_average': weekend_average,
        'weekend_ratio': (weekend_average / weekday_average) if weekday_average > 0 else 0.0,
        'highest_day': {'day': ranked[0][0], 'average': ranked[0][1]},
        'lowest_day': {'day': ranked[-1][0], 'average': ranked[-1][1]},
        'weekday_vs_weekend': calculate_weekday_weekend_comparison(records),
    }


def get_seasonal_patterns(records: Sequence[Any]) -> Dict[str, Any]:
    by_season = {season: [] for season in SEASONS}
    for record in records:
        by_season[get_season(record.timestamp.month)].append(record)

    breakdown = []
    for season, season_records in by_season.items():
        top_category, _ = CategoryAggregator.get_top_category(season_records)
        breakdown.append({
            'season': season,
            'total': sum_values(season_records),
            'average': average_value(season_records),
            'activities': len(season_records),
            'top_category': top_category,
        })

    totals = [entry['total'] for entry in breakdown]
    peak = max(breakdown, key=lambda entry: entry['total'])
    return {
        'averages': {entry['season']: entry['average'] for entry in breakdown},
        'breakdown': breakdown,
        'peak_season': peak['season'],
        'total_range': max(totals) - min(totals),
    }


# ============================================================================
# FEED: ACHIEVEMENTS, WARNINGS, MILESTONES, CELEBRATIONS, NOTIFICATIONS
# ============================================================================

class InsightFeedGenerator:

    @staticmethod
    def generate_user_achievements(records: Sequence[Any], now: datetime) -> List[Dict[str, Any]]:
        achievements = []

        streak = calculate_logging_streak(records, now)
        if streak >= STREAK_ACHIEVEMENT_MIN:
            achievements.append({
                'type': 'achievement',
                'category': 'consistency',
                'priority': 'high' if streak >= 7 else 'medium',
                'title': f'{streak}-Day Tracking Streak! 🔥',
                'message': f"You've been consistently tracking for {streak} days in a row. Keep up the momentum!",
                'icon': '🔥',
                'points': streak * 10,
                'unlocked': True,
                'date': now,
            })

        weekly_trend = PeriodComparator.calculate_weekly_trend(records, now)
        change_percentage = weekly_trend['change_percentage']
        if change_percentage is not None and change_percentage < -10:
            reduction = abs(change_percentage)
            achievements.append({
                'type': 'achievement',
                'category': 'improvement',
                'priority': 'high' if reduction >= 25 else 'medium',
                'title': f'{reduction:.0f}% Weekly Reduction! 📉',
                'message': f"Excellent progress! You've reduced your weekly emissions by {reduction:.1f}%.",
                'icon': '📉',
                'points': math.floor(reduction * 5),
                'unlocked': True,
                'date': now,
            })

        patterns = calculate_improvement_patterns(records)
        if patterns['has_enough_data'] and patterns['best_improving_category']:
            best = patterns['best_improving_category']
            achievements.append({
                'type': 'achievement',
                'category': 'expertise',
                'priority': 'medium',
                'title': f'{best} Master! 🏆',
                'message': f"You're excelling at reducing {best} emissions!",
                'icon': '🏆',
                'points': 100,
                'unlocked': True,
                'date': now,
            })

        daily_totals = _by_day_totals(filter_days_back(records, now, 7))
        low_impact_days = [total for total in daily_totals.values() if total < LOW_IMPACT_DAY_LIMIT]
        if low_impact_days:
            achievements.append({
                'type': 'achievement',
                'category': 'daily_goal',
                'priority': 'medium',
                'title': 'Low Impact Day! 🌿',
                'message': f'You had {len(low_impact_days)} day(s) this week under 3kg CO₂. Great work!',
                'icon': '🌿',
                'points': len(low_impact_days) * 25,
                'unlocked': True,
                'date': now,
            })

        active_days = len(daily_totals)
        if active_days >= 6:
            achievements.append({
                'type': 'achievement',
                'category': 'completeness',
                'priority': 'medium',
                'title': 'Consistent Tracker! 📊',
                'message': f'You tracked activities for {active_days} out of 7 days this week!',
                'icon': '📊',
                'points': 50,
                'unlocked': True,
                'date': now,
            })

        return achievements

    @staticmethod
    def generate_warnings(records: Sequence[Any], now: datetime,
                          goals: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        warnings = []

        weekly_trend = PeriodComparator.calculate_weekly_trend(records, now)
        change_percentage = weekly_trend['change_percentage']
        if change_percentage is not None and change_percentage > 15:
            warnings.append({
                'type': 'warning',
                'category': 'trend',
                'priority': 'high',
                'title': 'Rising Emissions Alert! ⚠️',
                'message': f'Your emissions increased by {change_percentage:.1f}% this week. '
                           f'Consider reviewing your activities.',
                'icon': '⚠️',
                'actionable': True,
                'action': 'View Recommendations',
                'date': now,
            })

        weekly_goal = GoalComparator.calculate_personal_goal_comparisons(records, now, goals)['weekly']
        if weekly_goal['status'] == 'over_target':
            overshoot = weekly_goal['percentage_of_target'] - 100
            warnings.append({
                'type': 'warning',
                'category': 'goals',
                'priority': 'high' if overshoot > 25 else 'medium',
                'title': 'Weekly Goal Exceeded! 🎯',
                'message': f"You're {overshoot:.0f}% over your weekly goal with "
                           f"{weekly_goal['days_remaining']} days remaining.",
                'icon': '🎯',
                'actionable': True,
                'action': 'Adjust Activities',
                'date': now,
            })

        days_since = get_days_since_last_log(records, now)
        if days_since is not None and days_since > 2:
            warnings.append({
                'type': 'warning',
                'category': 'tracking',
                'priority': 'high' if days_since > 5 else 'medium',
                'title': 'Tracking Gap Detected! 📝',
                'message': f"It's been {days_since} days since your last activity log. Stay consistent!",
                'icon': '📝',
                'actionable': True,
                'action': 'Log Activity',
                'date': now,
            })

        daily_totals = _by_day_totals(filter_days_back(records, now, 7))
        high_days = [(day, total) for day, total in daily_totals.items() if total > HIGH_IMPACT_DAY_LIMIT]
        if high_days:
            highest_day, highest_value = max(high_days, key=lambda item: item[1])
            warnings.append({
                'type': 'warning',
                'category': 'daily_high',
                'priority': 'medium',
                'title': 'High Impact Day! 📈',
                'message': f'You had a high emission day ({highest_value:.1f}kg CO₂). '
                           f'Consider balancing with lower impact activities.',
                'icon': '📈',
                'actionable': True,
                'action': 'View Tips',
                'date': datetime.fromisoformat(highest_day),
            })

        return warnings

    @staticmethod
    def generate_milestones(records: Sequence[Any], now: datetime) -> List[Dict[str, Any]]:
        milestones = []
        total_activities = len(records)

        reached = next((m for m in ACTIVITY_MILESTONES if m <= total_activities < m + 5), None)
        if reached:
            milestones.append({
                'type': 'milestone',
                'category': 'activities',
                'priority': 'medium',
                'title': f'{reached} Activities Logged! 🎯',
                'message': f"Congratulations! You've tracked {total_activities} activities so far.",
                'icon': '🎯',
                'points': reached * 2,
                'progress': {'current': total_activities, 'target': reached, 'percentage': 100},
                'date': now,
            })

        if records:
            first_activity = min(r.timestamp for r in records)
            days_tracking = math.floor(days_between(first_activity, now))
            reached_days = next((m for m in TRACKING_DAY_MILESTONES if m <= days_tracking < m + 3), None)
            if reached_days:
                milestones.append({
                    'type': 'milestone',
                    'category': 'duration',
                    'priority': 'medium',
                    'title': f'{reached_days} Days of Tracking! 📅',
                    'message': f"You've been tracking your carbon footprint for {days_tracking} days!",
                    'icon': '📅',
                    'points': reached_days * 3,
                    'progress': {'current': days_tracking, 'target': reached_days, 'percentage': 100},
                    'date': now,
                })

        patterns = calculate_improvement_patterns(records)
        if patterns['has_enough_data'] and patterns['improvement_percent'] > 0:
            improvement = patterns['improvement_percent']
            reached_reduction = next((m for m in REDUCTION_MILESTONES if m <= improvement < m + 5), None)
            if reached_reduction:
                milestones.append({
                    'type': 'milestone',
                    'category': 'improvement',
                    'priority': 'high',
                    'title': f'{reached_reduction}% Total Reduction! 🌟',
                    'message': f"Amazing! You've reduced your emissions by {improvement:.1f}% overall.",
                    'icon': '🌟',
                    'points': reached_reduction * 10,
                    'progress': {'current': improvement, 'target': reached_reduction, 'percentage': 100},
                    'date': now,
                })

        next_milestone = next((m for m in NEXT_ACTIVITY_MILESTONES if m > total_activities), None)
        if next_milestone:
            milestones.append({
                'type': 'milestone',
                'category': 'upcoming',
                'priority': 'low',
                'title': f'{next_milestone} Activities',
                'message': f'{next_milestone - total_activities} activities to go!',
                'icon': '🎯',
                'points': next_milestone * 10,
                'progress': {
                    'current': total_activities,
                    'target': next_milestone,
                    'percentage': total_activities / next_milestone * 100,
                },
                'date': now,
            })

        weekly_average = get_weekly_average(records, now)
        if weekly_average > ECO_WARRIOR_WEEKLY_AVERAGE:
            milestones.append({
                'type': 'milestone',
                'category': 'carbon_reduction',
                'priority': 'low',
                'title': 'Eco Warrior Badge',
                'message': 'Reduce weekly average to 25kg CO₂',
                'icon': '🌱',
                'points': 500,
                'progress': {
                    'current': weekly_average,
                    'target': ECO_WARRIOR_WEEKLY_AVERAGE,
                    'percentage': min(ECO_WARRIOR_WEEKLY_AVERAGE / weekly_average * 100, 100),
                },
                'date': now,
            })

        return milestones

    @staticmethod
    def generate_celebrations(records: Sequence[Any], now: datetime,
                              goals: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        celebrations = []

        streak = calculate_logging_streak(records, now, lookback_days=max(STREAK_CELEBRATIONS))
        if streak in STREAK_CELEBRATIONS:
            celebrations.append({
                'type': 'celebration',
                'category': 'streak',
                'priority': 'high',
                'title': f'{streak}-Day Streak! 🔥',
                'message': f"Incredible consistency! You've tracked activities for {streak} days straight!",
                'icon': '🔥',
                'points': streak * 15,
                'date': now,
            })

        goal_comparisons = GoalComparator.calculate_personal_goal_comparisons(records, now, goals)
        on_track = [
            goal for goal in (goal_comparisons['daily'], goal_comparisons['weekly'], goal_comparisons['monthly'])
            if goal['status'] == 'on_track'
        ]
        if len(on_track) >= 2:
            celebrations.append({
                'type': 'celebration',
                'category': 'goals',
                'priority': 'medium',
                'title': 'Multiple Goals On Track! 🎯',
                'message': f"You're meeting {len(on_track)} of your emission goals. Fantastic progress!",
                'icon': '🎯',
                'points': len(on_track) * 50,
                'date': now,
            })

        return celebrations

    @staticmethod
    def generate_smart_notifications(records: Sequence[Any], now: datetime,
                                     goals: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        notifications = []

        if not filter_same_day(records, now.date()) and now.hour >= 18:
            notifications.append({
                'type': 'reminder',
                'priority': 'medium',
                'title': 'Daily Check-in Time! ⏰',
                'message': "Don't forget to log today's activities before the day ends.",
                'icon': '⏰',
                'actionable': True,
                'action': "Log Today's Activities",
                'timing': 'evening',
            })

        if js_weekday(now) == 0 and now.hour >= 10:
            weekly = get_weekly_stats(records, now)
            notifications.append({
                'type': 'review',
                'priority': 'medium',
                'title': 'Weekly Review Available! 📊',
                'message': f"This week: {weekly['activities']} activities, {weekly['total']:.1f}kg CO₂. "
                           f"View your detailed analysis.",
                'icon': '📊',
                'actionable': True,
                'action': 'View Weekly Report',
                'timing': 'weekly',
            })

        weekly_goal = GoalComparator.calculate_personal_goal_comparisons(records, now, goals)['weekly']
        if 80 < weekly_goal['percentage_of_target'] < 100:
            notifications.append({
                'type': 'progress',
                'priority': 'medium',
                'title': 'Close to Weekly Goal! 🎯',
                'message': f"You're at {weekly_goal['percentage_of_target']:.0f}% of your weekly goal. "
                           f"{weekly_goal['days_remaining']} days left!",
                'icon': '🎯',
                'actionable': True,
                'action': 'View Goal Progress',
                'timing': 'goal_proximity',
            })

        patterns = calculate_improvement_patterns(records)
        if patterns['has_enough_data'] and patterns['trend'] == 'improving':
            notifications.append({
                'type': 'motivation',
                'priority': 'low',
                'title': "You're Improving! 📈",
                'message': 'Your efforts are paying off! Keep up the great work toward sustainability.',
                'icon': '📈',
                'actionable': False,
                'timing': 'encouragement',
            })

        return notifications

    @staticmethod
    def generate_insight_feed(records: Sequence[Any], now: datetime,
                              goals: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        All feed items for `records`.

        `notifications` is the combined feed with smart notifications first;
        the summary counts its priorities.
        """
        if not records:
            welcome = {
                'type': 'welcome',
                'priority': 'medium',
                'title': 'Welcome to Carbon Tracking!',
                'message': 'Start by logging your first activity to begin your journey toward sustainability.',
                'icon': '🌱',
                'actionable': True,
                'action': 'Log First Activity',
            }
            return {
                'achievements': [],
                'warnings': [],
                'milestones': [],
                'celebrations': [],
                'notifications': [welcome],
                'summary': {
                    'total_insights': 0,
                    'high_priority': 0,
                    'medium_priority': 1,
                    'low_priority': 0,
                },
            }

        achievements = InsightFeedGenerator.generate_user_achievements(records, now)
        warnings = InsightFeedGenerator.generate_warnings(records, now, goals)
        milestones = InsightFeedGenerator.generate_milestones(records, now)
        celebrations = InsightFeedGenerator.generate_celebrations(records, now, goals)
        notifications = InsightFeedGenerator.generate_smart_notifications(records, now, goals)

        feed = notifications + achievements + warnings + milestones + celebrations
        return {
            'achievements': achievements,
            'warnings': warnings,
            'milestones': milestones,
            'celebrations': celebrations,
            'notifications': feed,
            'summary': {
                'total_insights': len(achievements) + len(warnings) + len(milestones) + len(celebrations),
                'high_priority': sum(1 for n in feed if n['priority'] == 'high'),
                'medium_priority': sum(1 for n in feed if n['priority'] == 'medium'),
                'low_priority': sum(1 for n in feed if n['priority'] == 'low'),
            },
        }


# ============================================================================
# REPORT
# ============================================================================

def compute_insights(records: Sequence[Any], now: datetime,
                     goals: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Everything the insights dashboard shows, computed from `records` as of `now`."""
    if not records:
        return {
            'has_data': False,
            'message': 'Start tracking activities to see personalized insights!',
        }

    stats = AnalyticsStatsCalculator.calculate_stats([float(r.value) for r in records])

    weekly_data = get_weekly_trend_data(records, now)
    monthly_data = get_monthly_trend_data(records, now)
    weekly_average = get_weekly_average(records, now)
    carbon_score = calculate_carbon_score(weekly_average)
    score_interpretation = get_score_interpretation(carbon_score)

    top_category, top_category_value = CategoryAggregator.get_top_category(records)
    feed = InsightFeedGenerator.generate_insight_feed(records, now, goals)

    return {
        'has_data': True,
        'summary': {
            'total_emissions': stats['sum'],
            'total_activities': stats['count'],
            'average_emission': stats['average'],
            'median_emission': stats['median'],
            'carbon_score': carbon_score,
            'score_interpretation': score_interpretation,
            'top_category': top_category,
            'top_category_value': top_category_value,
        },
        'trends': {
            'weekly': TrendDetector.detect_trend([week['total'] for week in weekly_data]),
            'monthly': TrendDetector.detect_trend([month['total'] for month in monthly_data]),
            'weekly_change': PeriodComparator.calculate_weekly_trend(records, now),
            'monthly_change': calculate_monthly_trend(records, now),
            'weekly_data': weekly_data,
            'monthly_data': monthly_data,
        },
        'categories': {
            'breakdown': CategoryAggregator.get_category_breakdown(records),
            'top_categories': CategoryAggregator.get_top_categories(records, 5),
            'reduction_suggestions': CategoryAggregator.generate_reduction_suggestions(
                CategoryAggregator.calculate_category_totals(records)),
        },
        'patterns': {
            'daily': get_daily_patterns(records),
            'seasonal': get_seasonal_patterns(records),
            'improvement': calculate_improvement_patterns(records),
        },
        'performance': {
            'carbon_score': carbon_score,
            'score_interpretation': score_interpretation,
            'weekly_average': weekly_average,
            'consistency': get_consistency_metrics(records),
            'logging_streak': calculate_logging_streak(records, now),
            'days_since_last_log': get_days_since_last_log(records, now),
        },
        'recommendations': compute_recommendations(records, now)[:5],
        'achievements': feed['achievements'],
        'milestones': feed['milestones'],
        'generated_at': now,
    }


# ============================================================================
# DASHBOARD SUMMARIES
# ============================================================================

def get_daily_mood(today_total: float) -> str:
    if today_total < 5:
        return 'excellent'
    if today_total < 8:
        return 'good'
    if today_total < 12:
        return 'moderate'
    return 'needs_attention'


def build_daily_summary(records: Sequence[Any], now: datetime,
                        goals: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Today against yesterday, goal status, streak and the top high-priority notifications."""
    today = now.date()
    today_records = filter_same_day(records, today)
    yesterday_records = filter_same_day(records, today - timedelta(days=1))

    today_total = sum_values(today_records)
    yesterday_total = sum_values(yesterday_records)
    metrics = change_metrics(today_total, yesterday_total)

    goal_comparisons = GoalComparator.calculate_personal_goal_comparisons(records, now, goals)
    weekly_goal = goal_comparisons['weekly']
    feed = InsightFeedGenerator.generate_insight_feed(records, now, goals)

    categories = []
    for record in today_records:
        if record.category not in categories:
            categories.append(record.category)

    return {
        'today': {
            'date': today,
            'emissions': today_total,
            'activities': len(today_records),
            'categories': categories,
        },
        'comparison': {
            'yesterday_emissions': yesterday_total,
            'change': metrics['change'],
            'change_percentage': metrics['change_percentage'],
            'is_new_baseline': metrics['is_new_baseline'],
        },
        'goals': {
            'daily': goal_comparisons['daily'],
            'weekly': {
                'target': weekly_goal['target'],
                'current': weekly_goal['actual'],
                'percentage': weekly_goal['percentage_of_target'],
                'status': weekly_goal['status'],
                'days_remaining': weekly_goal['days_remaining'],
            },
        },
        'quick_insights': {
            'streak': calculate_logging_streak(records, now),
            'priority_notifications': [n for n in feed['notifications'] if n['priority'] == 'high'][:3],
            'mood': get_daily_mood(today_total),
        },
        'generated_at': now,
    }


def calculate_quick_stats(records: Sequence[Any], now: datetime) -> Dict[str, Any]:
    """
    Headline numbers for the dashboard.

    The weekly comparison uses a +/-5 % band for `stable`.
    """
    weekly = PeriodComparator.calculate_weekly_trend(records, now)
    change_percentage = weekly['change_percentage'] or 0.0
    if change_percentage > 5 or (weekly['is_new_baseline'] and weekly['change'] > 0):
        weekly_trend = 'increasing'
    elif change_percentage < -5:
        weekly_trend = 'decreasing'
    else:
        weekly_trend = 'stable'

    weekly_comparison = {
        'current': weekly['current_week'],
        'previous': weekly['previous_week'],
        'change_percentage': weekly['change_percentage'],
        'is_new_baseline': weekly['is_new_baseline'],
        'trend': weekly_trend,
        'current_activities': len(filter_days_back(records, now, 7)),
        'previous_activities': len(filter_days_back(records, now, 7, offset_days=7)),
    }

    if not records:
        return {
            'has_data': False,
            'total_emissions': 0.0,
            'total_activities': 0,
            'avg_emission': 0.0,
            'categories': [],
            'tracking_days': 0,
            'daily_average': 0.0,
            'weekly_comparison': weekly_comparison,
            'generated_at': now,
        }

    total = sum_values(records)
    timestamps = [r.timestamp for r in records]
    tracking_days = math.ceil(days_between(min(timestamps), max(timestamps))) + 1

    return {
        'has_data': True,
        'total_emissions': total,
        'total_activities': len(records),
        'avg_emission': total / len(records),
        'categories': list(CategoryAggregator.group_by_category(records)),
        'tracking_days': tracking_days,
        'daily_average': total / tracking_days,
        'weekly_comparison': weekly_comparison,
        'generated_at': now,
    }
