"""
Rule-based recommendations for reducing emissions.

Each recommendation is a plain dict:
    {type, category, urgency, message, impact}
urgency is high / medium / low; impact is high / medium / low / positive.
"""

from datetime import datetime
from typing import Dict, Any, List, Optional, Sequence

from footprint.services.analytics_base import average_value, sum_values
from footprint.services.category_service import CategoryAggregator
from footprint.services.comparison_service import PeriodComparator
from footprint.utils.time_windows import (
    filter_days_back,
    get_season,
    split_weekday_weekend
)


# ============================================================================
# PLAYBOOKS
# ============================================================================

# thresholds are kg CO2e totals for the user's top category
CATEGORY_PLAYBOOK = {
    'Transport': {
        'tips': [
            'Consider cycling or walking for short trips under 2 miles',
            'Use public transportation when possible',
            'Combine multiple errands into one efficient trip',
            'Try carpooling or ride-sharing for longer journeys',
            'Consider working from home one day per week',
            'Maintain your vehicle for better fuel efficiency',
        ],
        'thresholds': {'high': 20, 'medium': 10},
    },
    'Food': {
        'tips': [
            'Try meal planning to reduce food waste',
            'Consider plant-based meals 2-3 times per week',
            'Buy local and seasonal produce when possible',
            'Reduce portion sizes to minimize waste',
            'Choose products with minimal packaging',
            'Start a small herb garden for fresh ingredients',
        ],
        'thresholds': {'high': 15, 'medium': 8},
    },
    'Energy': {
        'tips': [
            'Switch to LED light bulbs throughout your home',
            'Unplug electronics when not in use',
            'Use a programmable thermostat',
            'Adjust thermostat by 2-3 degrees',
            'Air dry clothes instead of using the dryer',
            'Use cold water for washing clothes when possible',
        ],
        'thresholds': {'high': 25, 'medium': 12},
    },
    'Housing': {
        'tips': [
            'Improve home insulation to reduce heating/cooling needs',
            'Use energy-efficient appliances',
            'Consider renewable energy options',
            'Regular maintenance of HVAC systems',
            'Use natural lighting when possible',
            'Install low-flow water fixtures',
        ],
        'thresholds': {'high': 30, 'medium': 15},
    },
    'Waste': {
        'tips': [
            "Practice the 3 R's: Reduce, Reuse, Recycle",
            'Compost organic waste',
            'Choose reusable alternatives to single-use items',
            'Repair items instead of replacing them',
            'Donate items you no longer need',
            'Buy products with minimal packaging',
        ],
        'thresholds': {'high': 10, 'medium': 5},
    },
    'Consumption': {
        'tips': [
            'Practice mindful consumption - buy only what you need',
            'Choose quality items that last longer',
            'Support local and sustainable businesses',
            'Consider second-hand options for non-essential items',
            'Share or borrow items you rarely use',
            'Research the environmental impact before purchasing',
        ],
        'thresholds': {'high': 18, 'medium': 9},
    },
    'Digital': {
        'tips': [
            'Reduce screen time and streaming when possible',
            'Use devices longer before upgrading',
            "Stream in lower quality when high definition isn't needed",
            'Turn off devices instead of leaving them on standby',
            'Use cloud services efficiently',
            'Choose energy-efficient devices',
        ],
        'thresholds': {'high': 8, 'medium': 4},
    },
}

TIPS_PER_URGENCY = {'high': 3, 'medium': 2, 'low': 1}

SEASONAL_TIPS = {
    'Spring': [
        'Spring cleaning? Donate items instead of throwing them away',
        'Start a garden for fresh, local produce',
        'Take advantage of milder weather for walking and cycling',
    ],
    'Summer': [
        'Use fans instead of air conditioning when possible',
        'Grill outdoors to keep your house cooler',
        'Take advantage of longer daylight for outdoor activities',
    ],
    'Fall': [
        'Prepare your home for winter to improve energy efficiency',
        'Use fallen leaves for natural composting',
        'Harvest rainwater for garden use',
    ],
    'Winter': [
        'Lower your thermostat when sleeping or away',
        'Use natural light during shorter winter days',
        'Consider energy-efficient heating options',
    ],
}

URGENCY_WEIGHT = {'high': 3, 'medium': 2, 'low': 1}
IMPACT_WEIGHT = {'high': 3, 'medium': 2, 'low': 1, 'positive': 1}

MAX_RECOMMENDATIONS = 8
IMPROVEMENT_MIN_RECORDS = 4
FOCUS_THRESHOLD_PERCENT = -10

GETTING_STARTED_RECOMMENDATIONS = [
    {
        'type': 'getting_started',
        'category': 'General',
        'urgency': 'medium',
        'message': 'Start tracking your daily activities to receive personalized recommendations!',
        'impact': 'high',
    },
    {
        'type': 'tip',
        'category': 'General',
        'urgency': 'low',
        'message': 'Small changes in daily habits can make a big difference for the environment.',
        'impact': 'medium',
    },
]


def _recommendation(rec_type: str, category: str, urgency: str, message: str, impact: str) -> Dict[str, str]:
    return {
        'type': rec_type,
        'category': category,
        'urgency': urgency,
        'message': message,
        'impact': impact,
    }


def _improvement_trend(improvement: float) -> str:
    if improvement > 0:
        return 'improving'
    if improvement < 0:
        return 'worsening'
    return 'stable'


# ============================================================================
# PATTERN ANALYSIS
# ============================================================================

def calculate_weekday_weekend_comparison(records: Sequence[Any]) -> Dict[str, Any]:
    weekday, weekend = split_weekday_weekend(records)
    weekday_avg = average_value(weekday)
    weekend_avg = average_value(weekend)

    if weekday_avg > weekend_avg:
        comparison = 'weekdays_higher'
    elif weekend_avg > weekday_avg:
        comparison = 'weekends_higher'
    else:
        comparison = 'equal'

    return {
        'weekday': {'total': sum_values(weekday), 'average': weekday_avg, 'activities': len(weekday)},
        'weekend': {'total': sum_values(weekend), 'average': weekend_avg, 'activities': len(weekend)},
        'comparison': comparison,
    }


def calculate_improvement_patterns(records: Sequence[Any]) -> Dict[str, Any]:
    """
    Compare the first half of a user's records with the second half.

    Records are ordered by timestamp and split at the midpoint; a drop in
    the average value counts as improving.
    """
    if len(records) < IMPROVEMENT_MIN_RECORDS:
        return {
            'has_enough_data': False,
            'message': 'Need more data to identify improvement patterns',
        }

    ordered = sorted(records, key=lambda r: r.timestamp)
    mid_point = len(ordered) // 2
    first_half = ordered[:mid_point]
    second_half = ordered[mid_point:]

    first_avg = average_value(first_half)
    second_avg = average_value(second_half)
    improvement = first_avg - second_avg
    improvement_percent = (improvement / first_avg * 100) if first_avg > 0 else 0.0

    category_improvements = {}
    for category in CategoryAggregator.group_by_category(ordered):
        cat_first = [r for r in first_half if r.category == category]
        cat_second = [r for r in second_half if r.category == category]
        if not cat_first or not cat_second:
            continue

        cat_first_avg = average_value(cat_first)
        cat_improvement = cat_first_avg - average_value(cat_second)
        category_improvements[category] = {
            'improvement': cat_improvement,
            'improvement_percent': (cat_improvement / cat_first_avg * 100) if cat_first_avg > 0 else 0.0,
            'trend': _improvement_trend(cat_improvement),
        }

    best_improving = None
    if category_improvements:
        best_improving = max(
            category_improvements.items(),
            key=lambda item: item[1]['improvement_percent']
        )[0]

    return {
        'has_enough_data': True,
        'overall_improvement': improvement,
        'improvement_percent': improvement_percent,
        'trend': _improvement_trend(improvement),
        'category_improvements': category_improvements,
        'best_improving_category': best_improving,
    }


# ============================================================================
# GENERATORS
# ============================================================================

class RecommendationGenerator:

    @staticmethod
    def generate_category_recommendations(top_category: Optional[str], top_value: float) -> List[Dict[str, str]]:
        """Priority entry for the top category followed by 3/2/1 tips by urgency."""
        playbook = CATEGORY_PLAYBOOK.get(top_category)
        if not playbook:
            return []

        thresholds = playbook['thresholds']
        if top_value >= thresholds['high']:
            urgency = 'high'
        elif top_value >= thresholds['medium']:
            urgency = 'medium'
        else:
            urgency = 'low'

        recommendations = [_recommendation(
            'priority', top_category, urgency,
            f'Focus on reducing {top_category} emissions '
            f'(your highest category at {top_value:.1f} kg CO₂)',
            'high'
        )]

        for index, tip in enumerate(playbook['tips'][:TIPS_PER_URGENCY[urgency]]):
            recommendations.append(_recommendation(
                'action', top_category, urgency, tip, 'high' if index == 0 else 'medium'))

        return recommendations

    @staticmethod
    def generate_time_based_recommendations(records: Sequence[Any], now: datetime) -> List[Dict[str, str]]:
        recent = filter_days_back(records, now, 7)
        if not recent:
            return []

        recommendations = []

        weekly_trend = PeriodComparator.calculate_weekly_trend(records, now)
        if weekly_trend['trend'] == 'increasing':
            if weekly_trend['change_percentage'] is None:
                detail = f'by {weekly_trend["change"]:.1f} kg CO₂'
            else:
                detail = f'by {abs(weekly_trend["change_percentage"]):.1f}%'
            recommendations.append(_recommendation(
                'alert', 'General', 'high',
                f'Your emissions increased {detail} this week. Consider reviewing your recent activities.',
                'high'
            ))

        comparison = calculate_weekday_weekend_comparison(recent)['comparison']
        if comparison == 'weekends_higher':
            recommendations.append(_recommendation(
                'insight', 'Lifestyle', 'medium',
                'Your weekend emissions are higher than weekdays. Consider eco-friendly weekend activities.',
                'medium'
            ))
        elif comparison == 'weekdays_higher':
            recommendations.append(_recommendation(
                'insight', 'Lifestyle', 'medium',
                'Your weekday emissions are higher. Consider sustainable commuting options or work-from-home days.',
                'medium'
            ))

        return recommendations

    @staticmethod
    def generate_improvement_recommendations(records: Sequence[Any]) -> List[Dict[str, str]]:
        patterns = calculate_improvement_patterns(records)

        if not patterns['has_enough_data']:
            return [_recommendation(
                'encouragement', 'General', 'low',
                'Keep tracking your activities to unlock personalized improvement insights!',
                'low'
            )]

        recommendations = []
        if patterns['trend'] == 'improving':
            recommendations.append(_recommendation(
                'celebration', 'General', 'low',
                f'Great progress! You\'ve reduced emissions by {patterns["improvement_percent"]:.1f}% '
                f'compared to when you started.',
                'positive'
            ))
        elif patterns['trend'] == 'worsening':
            recommendations.append(_recommendation(
                'motivation', 'General', 'medium',
                "Your emissions have increased recently. Let's get back on track with some focused actions!",
                'medium'
            ))

        best = patterns['best_improving_category']
        if best:
            recommendations.append(_recommendation(
                'success', best, 'low',
                f'Excellent work on reducing {best} emissions! Keep up the momentum.',
                'positive'
            ))

        for category, improvement in patterns['category_improvements'].items():
            if improvement['trend'] == 'worsening' and improvement['improvement_percent'] < FOCUS_THRESHOLD_PERCENT:
                recommendations.append(_recommendation(
                    'focus', category, 'high',
                    f'{category} emissions have increased by {abs(improvement["improvement_percent"]):.1f}%. '
                    f'This category needs attention.',
                    'high'
                ))

        return recommendations

    @staticmethod
    def generate_seasonal_recommendations(now: datetime) -> List[Dict[str, str]]:
        """One tip for the current season, rotating weekly by ISO week number."""
        tips = SEASONAL_TIPS[get_season(now.month)]
        week_number = now.isocalendar()[1]
        return [_recommendation('seasonal', 'Lifestyle', 'low', tips[week_number % len(tips)], 'medium')]

    @staticmethod
    def prioritize_recommendations(recommendations: List[Dict[str, str]]) -> List[Dict[str, str]]:
        """Highest urgency + impact weight first; equal scores keep their order."""
        return sorted(
            recommendations,
            key=lambda r: URGENCY_WEIGHT.get(r['urgency'], 0) + IMPACT_WEIGHT.get(r['impact'], 0),
            reverse=True
        )

    @staticmethod
    def generate_all(records: Sequence[Any], now: datetime) -> List[Dict[str, str]]:
        """Every recommendation for `records`, prioritized."""
        if not records:
            return [dict(rec) for rec in GETTING_STARTED_RECOMMENDATIONS]

        recommendations = []
        top_category, top_value = CategoryAggregator.get_top_category(records)
        recommendations.extend(
            RecommendationGenerator.generate_category_recommendations(top_category, top_value))
        recommendations.extend(RecommendationGenerator.generate_time_based_recommendations(records, now))
        recommendations.extend(RecommendationGenerator.generate_improvement_recommendations(records))
        recommendations.extend(RecommendationGenerator.generate_seasonal_recommendations(now))

        return RecommendationGenerator.prioritize_recommendations(recommendations)


def summarize_recommendations(recommendations: List[Dict[str, str]]) -> Dict[str, int]:
    return {
        'high_priority': sum(1 for r in recommendations if r['urgency'] == 'high'),
        'medium_priority': sum(1 for r in recommendations if r['urgency'] == 'medium'),
        'low_priority': sum(1 for r in recommendations if r['urgency'] == 'low'),
    }


def compute_recommendations(records: Sequence[Any], now: datetime) -> List[Dict[str, str]]:
    return RecommendationGenerator.generate_all(records, now)[:MAX_RECOMMENDATIONS]
