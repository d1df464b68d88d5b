"""
Per-user analysis facade.

Loads a user's records through EmissionService, runs the analytics core
against them and caches the results through the injected AnalysisCache.
"""

import logging
import time
from datetime import datetime
from typing import Dict, Any, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from footprint.services.analysis_cache import AnalysisCache
from footprint.services.category_service import CategoryAggregator
from footprint.services.comparison_service import compute_comparisons, resolve_goals
from footprint.services.emission_service import EmissionService
from footprint.services.insights_service import (
    InsightFeedGenerator,
    build_daily_summary,
    calculate_quick_stats,
    compute_insights
)
from footprint.services.recommendation_service import (
    MAX_RECOMMENDATIONS,
    RecommendationGenerator,
    summarize_recommendations
)
from footprint.utils.time_windows import (
    days_between,
    filter_days_back,
    filter_since,
    get_time_periods
)

logger = logging.getLogger(__name__)

ANALYSIS_TYPES = [
    'Time Period Comparisons',
    'Personal Goal Analysis',
    'Category Comparisons',
    'Historical Trends',
    'Performance Metrics',
]

DATA_UNAVAILABLE = 'Emission data is temporarily unavailable'


class AnalysisService:
    """
    Analysis entry points used by the analysis and auth blueprints.

    Every public method returns a JSON-ready dict. A failed data fetch is
    logged and reported as `{'has_data': False, 'error': ...}`.
    """

    def __init__(self, cache: AnalysisCache, goals: Optional[Dict[str, Any]] = None,
                 clock: Callable[[], datetime] = datetime.utcnow):
        self.cache = cache
        self.goals = resolve_goals(goals)
        self._clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_records(self, user_id: int, params: Optional[Dict[str, Any]] = None) -> Optional[List[Any]]:
        params = params or {}
        try:
            return EmissionService.fetch_records(
                user_id,
                start_date=params.get('start_date'),
                end_date=params.get('end_date'),
                category=params.get('category'),
                limit=params.get('limit')
            )
        except SQLAlchemyError:
            logger.exception('Failed to load emissions for user %s', user_id)
            return None

    def _cached(self, user_id: int, analysis_type: str, params: Optional[Dict[str, Any]],
                build: Callable[[], Dict[str, Any]], cache_empty: bool = True) -> Dict[str, Any]:
        cached = self.cache.get(user_id, analysis_type, params)
        if cached is not None:
            return {**cached, 'from_cache': True}

        started = time.perf_counter()
        result = build()
        logger.debug('%s analysis for user %s took %.1f ms',
                     analysis_type, user_id, (time.perf_counter() - started) * 1000)

        if 'error' not in result and (cache_empty or result.get('has_data', True)):
            self.cache.set(user_id, analysis_type, params, result)
        return result

    @staticmethod
    def _unavailable() -> Dict[str, Any]:
        return {'has_data': False, 'error': DATA_UNAVAILABLE}

    # ------------------------------------------------------------------
    # Analyses
    # ------------------------------------------------------------------

    def get_user_insights(self, user_id: int, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        def build():
            records = self._load_records(user_id, params)
            if records is None:
                return self._unavailable()
            return compute_insights(records, self._clock(), self.goals)

        return self._cached(user_id, 'insights', params, build, cache_empty=False)

    def get_recommendations(self, user_id: int) -> Dict[str, Any]:
        def build():
            records = self._load_records(user_id)
            if records is None:
                return self._unavailable()

            now = self._clock()
            prioritized = RecommendationGenerator.generate_all(records, now)
            result = {
                'has_data': bool(records),
                'recommendations': prioritized[:MAX_RECOMMENDATIONS],
                'total_recommendations': len(prioritized),
                'category_summary': summarize_recommendations(prioritized),
                'generated_at': now,
            }
            if records:
                this_week = filter_since(records, get_time_periods(now)['week_start'])
                this_week_total = sum(float(r.value) for r in this_week)
                result.update({
                    'reduction_suggestions': CategoryAggregator.generate_reduction_suggestions(
                        CategoryAggregator.calculate_category_totals(records)),
                    'top_categories': CategoryAggregator.get_top_categories(records, 3),
                    'this_week': {
                        'total': this_week_total,
                        'activities': len(this_week),
                        'average_daily': this_week_total / 7,
                    },
                })
            return result

        return self._cached(user_id, 'recommendations', None, build)

    def get_comparisons(self, user_id: int) -> Dict[str, Any]:
        def build():
            records = self._load_records(user_id)
            if records is None:
                return self._unavailable()
            if not records:
                return {
                    'has_data': False,
                    'message': 'Start tracking activities to see comparative analysis!',
                }

            timestamps = [r.timestamp for r in records]
            return {
                'has_data': True,
                'comparisons': compute_comparisons(records, self._clock(), self.goals),
                'summary': {
                    'total_data_points': len(records),
                    'date_range': {'earliest': min(timestamps), 'latest': max(timestamps)},
                    'analysis_types': ANALYSIS_TYPES,
                },
            }

        return self._cached(user_id, 'comparisons', None, build, cache_empty=False)

    def get_notifications(self, user_id: int) -> Dict[str, Any]:
        records = self._load_records(user_id)
        if records is None:
            return self._unavailable()

        now = self._clock()
        feed = InsightFeedGenerator.generate_insight_feed(records, now, self.goals)
        joined_days = int(days_between(min(r.timestamp for r in records), now)) if records else 0
        return {
            **feed,
            'metadata': {
                'user_id': user_id,
                'generated_at': now,
                'total_data_points': len(records),
                'user_joined_days': joined_days,
            },
        }

    def get_daily_summary(self, user_id: int) -> Dict[str, Any]:
        records = self._load_records(user_id)
        if records is None:
            return self._unavailable()
        return build_daily_summary(records, self._clock(), self.goals)

    def get_quick_stats(self, user_id: int) -> Dict[str, Any]:
        def build():
            records = self._load_records(user_id)
            if records is None:
                return self._unavailable()
            return calculate_quick_stats(records, self._clock())

        return self._cached(user_id, 'quick-stats', None, build)

    def get_basic_analysis(self, user_id: int) -> Dict[str, Any]:
        """Small summary returned alongside a successful login."""
        records = self._load_records(user_id)
        if records is None:
            return {'has_data': False, 'error': 'Analysis generation failed'}
        if not records:
            return {
                'has_data': False,
                'message': 'Start tracking activities to see personalized insights!',
            }

        top_category, top_value = CategoryAggregator.get_top_category(records)
        return {
            'has_data': True,
            'this_week_emissions': sum(float(r.value) for r in filter_days_back(records, self._clock(), 7)),
            'top_category': top_category,
            'top_category_value': top_value,
            'total_activities': len(records),
        }

    def get_chart_records(self, user_id: int) -> List[Any]:
        return self._load_records(user_id) or []

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear_user_cache(self, user_id: int) -> int:
        removed = self.cache.clear(user_id)
        logger.debug('Cleared %d cached analyses for user %s', removed, user_id)
        return removed

    def get_health_info(self) -> Dict[str, Any]:
        return {
            'status': 'healthy',
            'cache': {
                'size': self.cache.size,
                'enabled': True,
                'ttl_seconds': self.cache.ttl_seconds,
            },
            'timestamp': self._clock(),
        }
