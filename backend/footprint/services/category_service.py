from typing import Dict, List, Any, Iterable, Optional, Sequence, Tuple

from footprint.services.analytics_base import AnalyticsGrouper
from footprint.services.trend_service import TrendDetector
from footprint.utils.time_windows import group_by_period


# ============================================================================
# REDUCTION SUGGESTION TEXT
# ============================================================================

HIGH_IMPACT_SUGGESTIONS = {
    'transport': 'Consider carpooling, public transport, or electric vehicles for high-emission trips',
    'food': 'Reduce meat consumption and choose local, seasonal produce',
    'energy': 'Switch to renewable energy sources and improve home insulation',
    'housing': 'Implement water-saving measures and waste reduction practices',
}

MEDIUM_IMPACT_SUGGESTIONS = {
    'transport': 'Combine trips and choose more efficient transportation when possible',
    'food': 'Reduce food waste and choose lower-carbon protein sources occasionally',
    'energy': 'Use energy-efficient appliances and practice energy conservation',
    'housing': 'Reduce water usage and implement better waste sorting',
}

HIGH_SHARE_THRESHOLD = 30
MEDIUM_SHARE_THRESHOLD = 15


class CategoryAggregator:
    """Per-category totals, rankings and breakdowns of emission records."""

    @staticmethod
    def group_by_category(records: Iterable[Any]) -> Dict[str, List[Any]]:
        return AnalyticsGrouper.group_by_criterion(records, lambda r: r.category)

    @staticmethod
    def calculate_category_totals(records: Iterable[Any]) -> Dict[str, float]:
        """Plain category -> total mapping, in first-seen order."""
        totals = {}
        for record in records:
            totals[record.category] = totals.get(record.category, 0.0) + float(record.value)
        return totals

    @staticmethod
    def get_top_categories(records: Sequence[Any], n: int = 5) -> List[Dict[str, Any]]:
        """
        Top `n` categories by total emissions.

        Each entry carries its share of the grand total in percent. Ties keep
        the order in which categories first appear in `records`.
        """
        totals = CategoryAggregator.calculate_category_totals(records)
        grand_total = sum(totals.values())

        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return [
            {
                'category': category,
                'total': total,
                'percentage': (total / grand_total * 100) if grand_total > 0 else 0.0,
            }
            for category, total in ranked[:n]
        ]

    @staticmethod
    def get_top_category(records: Sequence[Any]) -> Tuple[Optional[str], float]:
        top = CategoryAggregator.get_top_categories(records, 1)
        if not top:
            return None, 0.0
        return top[0]['category'], top[0]['total']

    @staticmethod
    def get_category_trend(category_records: Sequence[Any]) -> Dict[str, Any]:
        """Regression trend over the category's weekly totals."""
        if not category_records or len(category_records) < 3:
            return {'trend': 'insufficient_data'}

        ordered = sorted(category_records, key=lambda r: r.timestamp)
        weekly_totals = AnalyticsGrouper.calculate_group_totals(group_by_period(ordered, 'week'))
        return TrendDetector.detect_trend([week['total'] for week in weekly_totals.values()])

    @staticmethod
    def get_category_breakdown(records: Sequence[Any]) -> List[Dict[str, Any]]:
        groups = CategoryAggregator.group_by_category(records)
        totals = AnalyticsGrouper.calculate_group_totals(groups)
        grand_total = sum(data['total'] for data in totals.values())

        ranked = sorted(totals.items(), key=lambda item: item[1]['total'], reverse=True)
        return [
            {
                'category': category,
                'total': data['total'],
                'activities': data['count'],
                'average': data['average'],
                'percentage': (data['total'] / grand_total * 100) if grand_total > 0 else 0.0,
                'trend': CategoryAggregator.get_category_trend(groups[category]),
            }
            for category, data in ranked
        ]

    @staticmethod
    def generate_reduction_suggestions(category_totals: Dict[str, float]) -> List[Dict[str, Any]]:
        """
        Suggest reductions for categories holding a large share of emissions.

        >= 30 % share: high priority with 30 % reduction potential.
        >= 15 % share: medium priority with 20 % reduction potential.
        """
        grand_total = sum(category_totals.values())
        if grand_total <= 0:
            return []

        suggestions = []
        for category, total in sorted(category_totals.items(), key=lambda item: item[1], reverse=True):
            percentage = total / grand_total * 100
            key = (category or '').lower()

            if percentage >= HIGH_SHARE_THRESHOLD:
                suggestions.append({
                    'category': category,
                    'priority': 'high',
                    'percentage': round(percentage, 1),
                    'suggestion': HIGH_IMPACT_SUGGESTIONS.get(
                        key, 'Focus on reducing activities in this high-impact category'),
                    'potential_reduction': total * 0.3,
                })
            elif percentage >= MEDIUM_SHARE_THRESHOLD:
                suggestions.append({
                    'category': category,
                    'priority': 'medium',
                    'percentage': round(percentage, 1),
                    'suggestion': MEDIUM_IMPACT_SUGGESTIONS.get(
                        key, 'Look for opportunities to optimize this category'),
                    'potential_reduction': total * 0.2,
                })

        return suggestions
