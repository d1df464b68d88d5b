from datetime import datetime

from footprint.services.recommendation_service import (
    GETTING_STARTED_RECOMMENDATIONS,
    MAX_RECOMMENDATIONS,
    SEASONAL_TIPS,
    RecommendationGenerator,
    calculate_improvement_patterns,
    calculate_weekday_weekend_comparison,
    compute_recommendations,
    summarize_recommendations
)


def test_category_recommendations_scale_with_urgency():
    high = RecommendationGenerator.generate_category_recommendations('Transport', 25.0)
    medium = RecommendationGenerator.generate_category_recommendations('Transport', 12.0)
    low = RecommendationGenerator.generate_category_recommendations('Transport', 5.0)

    assert len(high) == 4
    assert len(medium) == 3
    assert len(low) == 2
    assert high[0]['type'] == 'priority'
    assert '25.0 kg' in high[0]['message']
    assert all(r['urgency'] == 'high' for r in high)
    assert [r['impact'] for r in high[1:]] == ['high', 'medium', 'medium']


def test_category_recommendations_unknown_category():
    assert RecommendationGenerator.generate_category_recommendations('Pets', 50.0) == []
    assert RecommendationGenerator.generate_category_recommendations(None, 0.0) == []


def test_seasonal_tip_rotates_by_iso_week(now):
    tips = RecommendationGenerator.generate_seasonal_recommendations(now)

    assert len(tips) == 1
    summer = SEASONAL_TIPS['Summer']
    assert tips[0]['message'] == summer[24 % len(summer)]

    winter = RecommendationGenerator.generate_seasonal_recommendations(datetime(2024, 1, 10))
    assert winter[0]['message'] in SEASONAL_TIPS['Winter']


def test_prioritize_is_stable():
    recommendations = [
        {'urgency': 'low', 'impact': 'low', 'message': 'a'},
        {'urgency': 'high', 'impact': 'high', 'message': 'b'},
        {'urgency': 'medium', 'impact': 'low', 'message': 'c'},
        {'urgency': 'low', 'impact': 'medium', 'message': 'd'},
    ]

    ordered = RecommendationGenerator.prioritize_recommendations(recommendations)

    assert [r['message'] for r in ordered] == ['b', 'c', 'd', 'a']


def test_weekday_weekend_comparison(make_record):
    records = [
        make_record(10, timestamp=datetime(2024, 6, 8, 10)),   # Saturday
        make_record(2, timestamp=datetime(2024, 6, 10, 10)),   # Monday
    ]

    result = calculate_weekday_weekend_comparison(records)

    assert result['comparison'] == 'weekends_higher'


def test_improvement_patterns(make_record):
    records = [
        make_record(10, 'Food', days_ago=4),
        make_record(10, 'Transport', days_ago=3),
        make_record(5, 'Food', days_ago=2),
        make_record(5, 'Transport', days_ago=1),
    ]

    patterns = calculate_improvement_patterns(records)

    assert patterns['has_enough_data'] is True
    assert patterns['trend'] == 'improving'
    assert patterns['improvement_percent'] == 50.0
    assert patterns['category_improvements']['Food']['trend'] == 'improving'
    assert patterns['best_improving_category'] == 'Food'


def test_improvement_patterns_need_four_records(make_record):
    assert calculate_improvement_patterns([make_record(1)] * 3)['has_enough_data'] is False


def test_time_based_alert_on_new_baseline(make_record, now):
    records = [make_record(12, days_ago=1)]

    recommendations = RecommendationGenerator.generate_time_based_recommendations(records, now)

    alert = recommendations[0]
    assert alert['type'] == 'alert'
    assert 'by 12.0 kg' in alert['message']


def test_time_based_alert_with_percentage(make_record, now):
    records = [make_record(15, days_ago=1), make_record(10, days_ago=8)]

    recommendations = RecommendationGenerator.generate_time_based_recommendations(records, now)

    assert 'by 50.0%' in recommendations[0]['message']


def test_getting_started_for_new_users(now):
    recommendations = RecommendationGenerator.generate_all([], now)

    assert recommendations == GETTING_STARTED_RECOMMENDATIONS
    recommendations[0]['message'] = 'changed'
    assert GETTING_STARTED_RECOMMENDATIONS[0]['message'] != 'changed'


def test_compute_recommendations_caps_and_orders(make_record, now):
    records = [make_record(30, 'Transport', days_ago=d) for d in range(1, 6)]
    records += [make_record(1, 'Food', days_ago=9)]

    recommendations = compute_recommendations(records, now)

    assert 0 < len(recommendations) <= MAX_RECOMMENDATIONS
    assert recommendations[0]['urgency'] == 'high'
    summary = summarize_recommendations(recommendations)
    assert sum(summary.values()) == len(recommendations)
