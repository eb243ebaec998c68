"""
Date windows and series used by the dashboard.
"""
from datetime import date, datetime

from conftest import make_cursor
from vendorhub.services import stats_service

NOW = datetime(2024, 3, 15, 10, 30)


def test_day_range():
    assert stats_service.day_range(date(2024, 2, 29)) == (datetime(2024, 2, 29), datetime(2024, 3, 1))


def test_month_range_mid_year():
    assert stats_service.month_range(NOW) == (datetime(2024, 3, 1), datetime(2024, 4, 1))


def test_month_range_december():
    assert stats_service.month_range(datetime(2023, 12, 31, 23, 59)) == (datetime(2023, 12, 1), datetime(2024, 1, 1))


class TestRevenuePeriod:
    def test_default_is_seven_days(self):
        start, end = stats_service.revenue_period(None, NOW)
        assert (end - start).days == 7
        assert end == NOW

    def test_unknown_period_falls_back(self):
        assert stats_service.revenue_period("forever", NOW) == stats_service.revenue_period("7days", NOW)

    def test_thirty_days(self):
        start, _ = stats_service.revenue_period("30days", NOW)
        assert start == datetime(2024, 2, 14, 10, 30)

    def test_this_month(self):
        assert stats_service.revenue_period("thisMonth", NOW) == (datetime(2024, 3, 1), NOW)

    def test_last_month_across_year(self):
        assert stats_service.revenue_period("lastMonth", datetime(2024, 1, 10)) == (
            datetime(2023, 12, 1),
            datetime(2024, 1, 1),
        )


def test_daily_series_fills_gaps():
    rows = [{"_id": "2024-03-13", "count": 2, "revenue": 10.004}, {"_id": "2024-03-15", "count": 1, "revenue": 20}]

    series = stats_service.fill_daily_series(rows, date(2024, 3, 15), days=3)

    assert series == [
        {"date": "2024-03-13", "count": 2, "revenue": 10.0},
        {"date": "2024-03-14", "count": 0, "revenue": 0},
        {"date": "2024-03-15", "count": 1, "revenue": 20},
    ]


def test_daily_series_default_is_a_week():
    series = stats_service.fill_daily_series([], date(2024, 3, 15))
    assert len(series) == 7
    assert series[0]["date"] == "2024-03-09"


async def test_sum_revenue_counts_placed_and_delivered(mock_db):
    mock_db.carts.aggregate.side_effect = lambda pipeline: make_cursor([{"_id": None, "total": 99.999}])

    total = await stats_service.sum_revenue(mock_db, {"vendor": "v1"})

    pipeline = mock_db.carts.aggregate.call_args.args[0]
    assert pipeline[0]["$match"] == {"vendor": "v1", "status": {"$in": ["Placed", "Delivered"]}}
    assert total == 100.0


async def test_sum_revenue_without_orders(mock_db):
    assert await stats_service.sum_revenue(mock_db, {}) == 0


async def test_order_stats_are_scoped(mock_db):
    scope = {"vendor": {"$in": ["v1"]}}
    mock_db.carts.count_documents.return_value = 4

    stats = await stats_service.order_stats(mock_db, scope, NOW)

    assert stats["total_orders"] == 4
    assert stats["total_revenue"] == 0
    for call in mock_db.carts.count_documents.await_args_list:
        assert call.args[0]["vendor"] == {"$in": ["v1"]}
