from footprint.services.chart_service import EmissionChartService

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def test_weekly_chart_is_png(make_record, now):
    records = [make_record(5 + d, days_ago=d * 3) for d in range(10)]

    image = EmissionChartService.generate_weekly_chart(records, now, weeks=8)

    assert image.startswith(PNG_SIGNATURE)


def test_category_chart_is_png(make_record):
    records = [make_record(10, 'Transport'), make_record(4, 'Food'), make_record(2, 'Energy')]

    assert EmissionChartService.generate_category_chart(records).startswith(PNG_SIGNATURE)


def test_placeholder_chart_without_records(now):
    assert EmissionChartService.generate_weekly_chart([], now).startswith(PNG_SIGNATURE)
    assert EmissionChartService.generate_category_chart([]).startswith(PNG_SIGNATURE)
