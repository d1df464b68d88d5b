# ============================================================================
# SHARED ANALYTICS BASE LAYER
# ============================================================================


from typing import Dict, List, Any, Callable, Iterable, Sequence
import numpy as np


class AnalyticsStatsCalculator:
    """
    Shared statistical calculations over plain numeric sequences.

    Domain-agnostic - every function accepts an empty sequence and returns
    zero/neutral defaults instead of raising.
    """

    EMPTY_STATS = {
        'count': 0,
        'sum': 0.0,
        'average': 0.0,
        'min': 0.0,
        'max': 0.0,
        'median': 0.0,
        'standard_deviation': 0.0,
    }

    @staticmethod
    def calculate_stats(values: Sequence[float]) -> Dict[str, Any]:
        """
        Calculate count, sum, average, min, max, median and standard deviation.

        Standard deviation is the population one (divides by N).
        """
        if values is None or len(values) == 0:
            return dict(AnalyticsStatsCalculator.EMPTY_STATS)

        arr = np.array(values, dtype=float)
        sorted_values = np.sort(arr)
        total = float(np.sum(arr))
        average = total / len(arr)

        return {
            'count': int(len(arr)),
            'sum': total,
            'average': average,
            'min': float(sorted_values[0]),
            'max': float(sorted_values[-1]),
            'median': AnalyticsStatsCalculator.calculate_median(sorted_values),
            'standard_deviation': AnalyticsStatsCalculator.calculate_standard_deviation(arr, average),
        }

    @staticmethod
    def calculate_median(sorted_values: Sequence[float]) -> float:
        """Median of an already sorted sequence; even lengths average the middle pair."""
        n = len(sorted_values)
        if n == 0:
            return 0.0
        mid = n // 2
        if n % 2 == 0:
            return (float(sorted_values[mid - 1]) + float(sorted_values[mid])) / 2
        return float(sorted_values[mid])

    @staticmethod
    def calculate_standard_deviation(values: Sequence[float], mean: float) -> float:
        if len(values) == 0:
            return 0.0
        arr = np.array(values, dtype=float)
        return float(np.sqrt(np.mean((arr - mean) ** 2)))

    @staticmethod
    def calculate_percentage_change(new_value: float, old_value: float) -> float:
        """Percent change from old to new; a zero baseline yields 100 for growth, else 0."""
        if old_value == 0:
            return 100.0 if new_value > 0 else 0.0
        return (new_value - old_value) / old_value * 100

    @staticmethod
    def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
        """Linear interpolation between the closest ranks."""
        if len(sorted_values) == 0:
            return 0.0
        return float(np.percentile(np.array(sorted_values, dtype=float), percentile))

    @staticmethod
    def calculate_current_percentile(value: float, sorted_values: Sequence[float]) -> float:
        """Share (in %) of values strictly below `value`."""
        if len(sorted_values) == 0:
            return 0.0
        below = int(np.sum(np.array(sorted_values, dtype=float) < value))
        return below / len(sorted_values) * 100

    @staticmethod
    def calculate_moving_average(values: Sequence[float], window_size: int = 7) -> List[float]:
        if len(values) < window_size or window_size <= 0:
            return list(values)
        arr = np.array(values, dtype=float)
        kernel = np.ones(window_size) / window_size
        return [float(v) for v in np.convolve(arr, kernel, mode='valid')]

    @staticmethod
    def coefficient_of_variation(values: Sequence[float]) -> Dict[str, float]:
        """Average, standard deviation and their ratio in percent (0 when average is 0)."""
        stats = AnalyticsStatsCalculator.calculate_stats(values)
        average = stats['average']
        std_dev = stats['standard_deviation']
        return {
            'average': average,
            'standard_deviation': std_dev,
            'coefficient_of_variation': (std_dev / average * 100) if average > 0 else 0.0,
        }


class AnalyticsGrouper:
    """
    Shared utilities for grouping emission records.

    Provides flexible grouping by any criterion:
    - Categories
    - Time buckets (see utils.time_windows)
    - Custom groupings
    """

    @staticmethod
    def group_by_criterion(
        records: Iterable[Any],
        group_fn: Callable[[Any], str]
    ) -> Dict[str, List[Any]]:
        """
        Group records by any criterion using a grouping function.

        Example:
            # Group by day name
            grouped = AnalyticsGrouper.group_by_criterion(
                records,
                lambda r: r.timestamp.strftime('%A')
            )
        """
        groups = {}
        for record in records:
            group_key = group_fn(record)
            if group_key is None:
                continue
            groups.setdefault(group_key, []).append(record)
        return groups

    @staticmethod
    def calculate_group_totals(groups: Dict[str, List[Any]]) -> Dict[str, Dict[str, Any]]:
        """Total, count and average of `value` for each group."""
        totals = {}
        for key, records in groups.items():
            total = sum_values(records)
            count = len(records)
            totals[key] = {
                'total': total,
                'count': count,
                'average': total / count if count else 0.0,
            }
        return totals


def sum_values(records: Iterable[Any]) -> float:
    return float(sum(r.value for r in records))


def average_value(records: Sequence[Any]) -> float:
    return sum_values(records) / len(records) if records else 0.0
