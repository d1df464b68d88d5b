from datetime import datetime, timedelta

import pytest

from footprint.services.insights_service import (
    InsightFeedGenerator,
    build_daily_summary,
    calculate_carbon_score,
    calculate_logging_streak,
    calculate_quick_stats,
    compute_insights,
    get_daily_patterns,
    get_days_since_last_log,
    get_score_interpretation,
    get_seasonal_patterns,
    get_weekly_average,
    get_weekly_trend_data
)


def test_logging_streak_stops_at_first_gap(make_record, now):
    records = [make_record(1, days_ago=d) for d in (0, 1, 2, 4)]

    assert calculate_logging_streak(records, now) == 3
    assert calculate_logging_streak([make_record(1, days_ago=1)], now) == 0


@pytest.mark.parametrize('weekly, score', [
    (0, 100),
    (17.5, 90),
    (35, 50),
    (70, 20),
    (140, 0),
])
def test_carbon_score(weekly, score):
    assert calculate_carbon_score(weekly) == score


def test_score_interpretation_levels():
    assert get_score_interpretation(95)['level'] == 'excellent'
    assert get_score_interpretation(50)['level'] == 'poor'
    assert get_score_interpretation(10)['level'] == 'critical'


def test_days_since_last_log(make_record, now):
    assert get_days_since_last_log([], now) is None
    assert get_days_since_last_log([make_record(1, days_ago=3, hours_ago=5)], now) == 3


def test_weekly_trend_data_buckets_calendar_weeks(make_record, now):
    records = [make_record(5, days_ago=1), make_record(7, days_ago=8)]

    weeks = get_weekly_trend_data(records, now)

    assert len(weeks) == 12
    assert weeks[-1]['start_date'] == datetime(2024, 6, 9)
    assert weeks[-1]['total'] == 5
    assert weeks[-2]['total'] == 7
    assert weeks[0]['week'] == 'Week 1'


def test_weekly_average_counts_empty_weeks(make_record, now):
    assert get_weekly_average([make_record(20, days_ago=1)], now) == 5.0
    assert get_weekly_average([], now) == 0.0


def test_daily_patterns(make_record):
    records = [
        make_record(8, timestamp=datetime(2024, 6, 8, 9)),    # Saturday
        make_record(2, timestamp=datetime(2024, 6, 10, 9)),   # Monday
    ]

    patterns = get_daily_patterns(records)

    assert patterns['day_averages']['Saturday'] == 8
    assert patterns['highest_day']['day'] == 'Saturday'
    assert patterns['weekend_average'] == 4.0
    assert patterns['weekday_average'] == pytest.approx(0.4)


def test_seasonal_patterns(make_record):
    records = [
        make_record(10, 'Energy', timestamp=datetime(2024, 1, 5)),
        make_record(3, 'Transport', timestamp=datetime(2024, 7, 5)),
    ]

    seasonal = get_seasonal_patterns(records)

    assert seasonal['peak_season'] == 'Winter'
    assert seasonal['total_range'] == 10
    winter = next(s for s in seasonal['breakdown'] if s['season'] == 'Winter')
    assert winter['top_category'] == 'Energy'


def test_feed_for_new_user_is_a_welcome(now):
    feed = InsightFeedGenerator.generate_insight_feed([], now)

    assert feed['notifications'][0]['type'] == 'welcome'
    assert feed['summary'] == {
        'total_insights': 0,
        'high_priority': 0,
        'medium_priority': 1,
        'low_priority': 0,
    }


def test_streak_achievement_and_celebration(make_record, now):
    records = [make_record(1, days_ago=d) for d in range(7)]

    achievements = InsightFeedGenerator.generate_user_achievements(records, now)
    celebrations = InsightFeedGenerator.generate_celebrations(records, now)

    streak = next(a for a in achievements if a['category'] == 'consistency')
    assert streak['title'].startswith('7-Day Tracking Streak')
    assert streak['priority'] == 'high'
    assert streak['points'] == 70
    assert any(c['category'] == 'streak' for c in celebrations)


@pytest.mark.parametrize('days', [60, 100])
def test_long_streak_celebrations(make_record, now, days):
    records = [make_record(1, days_ago=d) for d in range(days)]

    celebrations = InsightFeedGenerator.generate_celebrations(records, now)

    streak = next(c for c in celebrations if c['category'] == 'streak')
    assert streak['title'] == f'{days}-Day Streak! 🔥'
    assert streak['points'] == days * 15


def test_reduction_achievement_ignores_new_baseline(make_record, now):
    reduced = [make_record(10, days_ago=1), make_record(20, days_ago=8)]
    baseline = [make_record(10, days_ago=1)]

    reduced_titles = [a['category'] for a in InsightFeedGenerator.generate_user_achievements(reduced, now)]
    baseline_titles = [a['category'] for a in InsightFeedGenerator.generate_user_achievements(baseline, now)]

    assert 'improvement' in reduced_titles
    assert 'improvement' not in baseline_titles


def test_warnings(make_record, now):
    records = [make_record(40, days_ago=3), make_record(10, days_ago=9)]

    warnings = InsightFeedGenerator.generate_warnings(records, now)
    categories = {w['category'] for w in warnings}

    assert {'trend', 'goals', 'tracking', 'daily_high'} <= categories
    tracking = next(w for w in warnings if w['category'] == 'tracking')
    assert tracking['message'].startswith("It's been 3 days")


def test_warnings_respect_goal_overrides(make_record, now):
    records = [make_record(20, days_ago=0, hours_ago=1)]

    default_goals = InsightFeedGenerator.generate_warnings(records, now)
    strict_goals = InsightFeedGenerator.generate_warnings(records, now, {'weekly_target': 10.0})

    assert 'goals' not in {w['category'] for w in default_goals}
    assert 'goals' in {w['category'] for w in strict_goals}


def test_milestones(make_record, now):
    records = [make_record(1, days_ago=d % 5) for d in range(10)]

    milestones = InsightFeedGenerator.generate_milestones(records, now)
    by_category = {m['category']: m for m in milestones}

    assert by_category['activities']['title'].startswith('10 Activities')
    assert by_category['upcoming']['progress']['target'] == 25
    assert 'carbon_reduction' not in by_category


def test_evening_reminder_when_nothing_logged_today(make_record):
    evening = datetime(2024, 6, 12, 19, 0)
    records = [make_record(1, timestamp=evening - timedelta(days=1))]

    notifications = InsightFeedGenerator.generate_smart_notifications(records, evening)

    assert notifications[0]['type'] == 'reminder'


def test_feed_summary_counts_combined_feed(make_record, now):
    records = [make_record(2, days_ago=d) for d in range(4)]

    feed = InsightFeedGenerator.generate_insight_feed(records, now)

    combined = feed['notifications']
    summary = feed['summary']
    assert summary['high_priority'] + summary['medium_priority'] + summary['low_priority'] == len(combined)
    assert summary['total_insights'] == (len(feed['achievements']) + len(feed['warnings'])
                                         + len(feed['milestones']) + len(feed['celebrations']))


def test_compute_insights(make_record, now):
    records = [
        make_record(10, 'Transport', days_ago=1),
        make_record(5, 'Food', days_ago=2),
        make_record(3, 'Energy', days_ago=15),
    ]

    insights = compute_insights(records, now)

    assert insights['has_data'] is True
    assert insights['summary']['total_emissions'] == 18
    assert insights['summary']['top_category'] == 'Transport'
    assert insights['categories']['top_categories'][0]['percentage'] == pytest.approx(55.56, abs=0.01)
    assert len(insights['trends']['weekly_data']) == 12
    assert len(insights['recommendations']) <= 5
    assert insights['generated_at'] == now


def test_compute_insights_without_records(now):
    assert compute_insights([], now)['has_data'] is False


def test_daily_summary(make_record, now):
    records = [
        make_record(4, 'Food', hours_ago=2),
        make_record(2, 'Transport', hours_ago=1),
        make_record(3, 'Food', days_ago=1),
    ]

    summary = build_daily_summary(records, now)

    assert summary['today']['emissions'] == 6
    assert summary['today']['categories'] == ['Food', 'Transport']
    assert summary['comparison']['change_percentage'] == pytest.approx(100.0)
    assert summary['quick_insights']['streak'] == 2
    assert summary['quick_insights']['mood'] == 'good'


def test_quick_stats(make_record, now):
    records = [make_record(20, days_ago=1), make_record(25, days_ago=8)]

    stats = calculate_quick_stats(records, now)

    assert stats['has_data'] is True
    assert stats['total_emissions'] == 45
    assert stats['tracking_days'] == 8
    assert stats['weekly_comparison']['trend'] == 'decreasing'
    assert stats['weekly_comparison']['previous_activities'] == 1


def test_quick_stats_without_records(now):
    stats = calculate_quick_stats([], now)

    assert stats['has_data'] is False
    assert stats['tracking_days'] == 0
    assert stats['weekly_comparison']['trend'] == 'stable'
