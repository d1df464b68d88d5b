import pytest

from footprint.services.comparison_service import (
    DEFAULT_GOALS,
    GoalComparator,
    HistoricalComparator,
    PeriodComparator,
    calculate_performance_metrics,
    change_metrics,
    compute_comparisons,
    resolve_goals
)


def test_weekly_trend_reduction(make_record, now):
    records = [make_record(20, days_ago=1), make_record(25, days_ago=8)]

    weekly = PeriodComparator.calculate_weekly_trend(records, now)

    assert weekly['current_week'] == 20
    assert weekly['previous_week'] == 25
    assert weekly['change'] == -5
    assert weekly['change_percentage'] == pytest.approx(-20.0)
    assert weekly['is_new_baseline'] is False
    assert weekly['trend'] == 'decreasing'


def test_zero_previous_total_is_a_new_baseline():
    metrics = change_metrics(10.0, 0.0)

    assert metrics['change_percentage'] is None
    assert metrics['is_new_baseline'] is True
    assert metrics['trend'] == 'increasing'
    assert metrics['interpretation'] == 'new_baseline'


def test_both_totals_zero():
    metrics = change_metrics(0.0, 0.0)

    assert metrics['change_percentage'] == 0.0
    assert metrics['is_new_baseline'] is False
    assert metrics['trend'] == 'stable'
    assert metrics['interpretation'] == 'minimal_change'


@pytest.mark.parametrize('current, previous, interpretation', [
    (103, 100, 'minimal_change'),
    (110, 100, 'moderate_change'),
    (80, 100, 'significant_change'),
    (150, 100, 'major_change'),
])
def test_change_interpretation(current, previous, interpretation):
    assert change_metrics(current, previous)['interpretation'] == interpretation


def test_time_period_comparisons_cover_each_window(make_record, now):
    records = [make_record(10, days_ago=1), make_record(5, days_ago=40)]

    comparisons = PeriodComparator.calculate_time_period_comparisons(records, now)

    assert list(comparisons) == ['weekly', 'monthly', 'quarterly']
    assert comparisons['monthly']['current']['total'] == 10
    assert comparisons['monthly']['previous']['total'] == 5
    assert comparisons['quarterly']['previous']['activities'] == 0


def test_category_comparisons(make_record, now):
    records = [
        make_record(10, 'Transport', days_ago=1),
        make_record(2, 'Food', days_ago=2),
        make_record(20, 'Transport', days_ago=9),
    ]

    result = PeriodComparator.calculate_category_comparisons(records, now)

    by_category = {c['category']: c for c in result['by_category']}
    assert by_category['Transport']['change_percentage'] == pytest.approx(-50.0)
    assert by_category['Food']['is_new_baseline'] is True
    assert [c['category'] for c in result['improving_categories']] == ['Transport']
    assert [c['category'] for c in result['worsening_categories']] == ['Food']
    assert result['most_changed'][0]['category'] == 'Transport'


def test_resolve_goals_merges_overrides():
    goals = resolve_goals({'weekly_target': 30.0, 'category_targets': {'Food': 40}})

    assert goals['weekly_target'] == 30.0
    assert goals['daily_target'] == DEFAULT_GOALS['daily_target']
    assert goals['category_targets']['Food'] == 40
    assert goals['category_targets']['Transport'] == 30
    assert DEFAULT_GOALS['category_targets']['Food'] == 25


@pytest.mark.parametrize('actual, status', [
    (30.0, 'on_track'),
    (35.0, 'on_track'),
    (38.0, 'close'),
    (50.0, 'over_target'),
])
def test_compare_to_goal_status(actual, status, now):
    result = GoalComparator.compare_to_goal(actual, 35.0, 'weekly', now)

    assert result['status'] == status
    assert result['difference'] == pytest.approx(actual - 35.0)
    assert result['days_remaining'] == 4


def test_personal_goals_daily_average_uses_days_with_data(make_record, now):
    records = [
        make_record(6, 'Transport', days_ago=1),
        make_record(2, 'Food', days_ago=1, hours_ago=1),
        make_record(4, 'Food', days_ago=3),
    ]

    goals = GoalComparator.calculate_personal_goal_comparisons(records, now)

    assert goals['daily']['actual'] == pytest.approx(6.0)
    assert goals['weekly']['actual'] == pytest.approx(12.0)
    targets = {t['category']: t for t in goals['category_targets']}
    assert targets['Food']['actual'] == pytest.approx(50.0)
    assert targets['Food']['status'] == 'over_target'
    assert targets['Energy']['actual'] == 0.0


def test_weekly_goal_projection(make_record, now):
    # Rolling weekly totals fall by 5 per week, newest week at 52
    records = [make_record(52 + 5 * i, days_ago=7 * i + 1) for i in range(8)]

    goals = GoalComparator.calculate_personal_goal_comparisons(records, now)

    projection = goals['weekly']['projection']
    assert projection['achievable'] is True
    assert projection['weeks_to_goal'] == 4


def test_percentile_rankings_need_enough_records(make_record, now):
    records = [make_record(5, days_ago=i) for i in range(5)]

    result = HistoricalComparator.calculate_percentile_rankings(records, now)

    assert result['has_enough_data'] is False


def test_percentile_rankings(make_record, now):
    records = [make_record(10 * (i + 1), days_ago=7 * i + 1) for i in range(6)]
    records += [make_record(1, days_ago=7 * i + 2) for i in range(6)]

    result = HistoricalComparator.calculate_percentile_rankings(records, now)

    assert result['has_enough_data'] is True
    assert result['current_week'] == 11
    assert result['current_percentile'] == 0.0
    assert result['interpretation'] == 'excellent'
    assert [p['percentile'] for p in result['percentiles']] == [10, 25, 50, 75, 90]


def test_all_time_statistics(make_record):
    records = [make_record(2, days_ago=4), make_record(4, days_ago=2), make_record(9, days_ago=0)]

    stats = HistoricalComparator.calculate_all_time_statistics(records)

    assert stats['total'] == 15
    assert stats['median'] == 4
    assert stats['date_range']['total_days'] == 5
    assert stats['daily_average'] == 3
    assert HistoricalComparator.calculate_all_time_statistics([]) is None


def test_performance_metrics(make_record, now):
    records = [make_record(5, days_ago=d) for d in range(1, 16)]

    performance = calculate_performance_metrics(records, now)

    assert performance['frequency']['active_days'] == 15
    assert performance['frequency']['tracking_frequency'] == 50.0
    assert performance['frequency']['interpretation'] == 'moderate_tracking'
    assert performance['consistency']['interpretation'] == 'very_consistent'
    assert calculate_performance_metrics([], now)['has_data'] is False


def test_compute_comparisons_bundle(make_record, now):
    result = compute_comparisons([make_record(5, days_ago=1)], now)

    assert set(result) == {'time_periods', 'personal_goals', 'categories',
                           'historical', 'performance', 'generated_at'}
    assert result['generated_at'] == now
