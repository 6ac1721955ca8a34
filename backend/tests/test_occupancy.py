"""
Tests for occupancy.py - daily census, monthly and period occupancy
"""
from datetime import date

from occupancy import (
    average_occupancy,
    current_occupancy,
    daily_census,
    iter_months,
    last_day_of_previous_month,
    monthly_occupancy,
    reporting_window,
)


class TestReportingWindow:
    """Tests for reporting_window / last_day_of_previous_month"""

    def test_last_day_of_previous_month(self):
        assert last_day_of_previous_month(date(2024, 3, 15)) == date(2024, 2, 29)
        assert last_day_of_previous_month(date(2025, 1, 1)) == date(2024, 12, 31)

    def test_start_is_later_of_floor_and_earliest_admission(self, make_episode):
        eps = [make_episode("a", "2024-05-10"), make_episode("b", "2024-03-01")]
        assert reporting_window(eps, date(2024, 1, 1), today=date(2024, 7, 4)) == (
            date(2024, 3, 1), date(2024, 6, 30),
        )
        assert reporting_window(eps, date(2024, 4, 1), today=date(2024, 7, 4)) == (
            date(2024, 4, 1), date(2024, 6, 30),
        )

    def test_no_admissions_uses_floor(self, make_episode):
        assert reporting_window([make_episode("a", None)], date(2024, 8, 1), today=date(2024, 10, 2)) == (
            date(2024, 8, 1), date(2024, 9, 30),
        )

    def test_nothing_to_anchor(self):
        assert reporting_window([], None) is None


class TestIterMonths:
    def test_across_year_boundary(self):
        months = list(iter_months(date(2024, 11, 15), date(2025, 2, 28)))
        assert months == [date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1), date(2025, 2, 1)]

    def test_empty_when_start_after_end(self):
        assert list(iter_months(date(2024, 5, 1), date(2024, 4, 30))) == []


class TestDailyCensus:
    def test_discharge_day_is_occupied(self, make_episode):
        eps = [make_episode("a", "2024-06-01", "2024-06-15")]
        assert daily_census(eps, date(2024, 6, 1)) == 1
        assert daily_census(eps, date(2024, 6, 15)) == 1
        assert daily_census(eps, date(2024, 6, 16)) == 0
        assert daily_census(eps, date(2024, 5, 31)) == 0

    def test_duplicate_records_same_patient_counted_once(self, make_episode):
        eps = [
            make_episode("a", "2024-06-01", "2024-06-10"),
            make_episode("a", "2024-06-05", "2024-06-20"),
        ]
        assert daily_census(eps, date(2024, 6, 7)) == 1

    def test_unknown_identity_not_undercounted(self, make_episode):
        eps = [
            make_episode("maria", "2024-06-01", known=False),
            make_episode("maria", "2024-06-01", known=False),
        ]
        assert daily_census(eps, date(2024, 6, 2)) == 2


class TestAverageOccupancy:
    """Tests for average_occupancy function"""

    def test_scenario_single_open_patient(self, make_episode):
        """Capacity 10, one patient from day 1 of a 30-day month, never discharged -> 10%"""
        eps = [make_episode("a", "2024-06-01")]
        assert average_occupancy(eps, 10, date(2024, 6, 1), date(2024, 6, 30)) == 10.0

    def test_scenario_with_derived_window(self, make_episode):
        eps = [make_episode("a", "2024-06-01")]
        assert average_occupancy(eps, 10, floor_date=date(2024, 1, 1), today=date(2024, 7, 20)) == 10.0

    def test_partial_month(self, make_episode):
        eps = [make_episode("a", "2024-06-01", "2024-06-15")]
        # 15 of 30 days at 1/10
        assert average_occupancy(eps, 10, date(2024, 6, 1), date(2024, 6, 30)) == 5.0

    def test_month_of_months_not_flat_daily(self, make_episode):
        """Full February + empty March averages to 50%, not 29/60 days"""
        eps = [make_episode("a", "2024-02-01", "2024-02-29")]
        assert average_occupancy(eps, 1, date(2024, 2, 1), date(2024, 3, 31)) == 50.0

    def test_whole_months_enumerated(self, make_episode):
        """A mid-month start still averages over every day of that month"""
        eps = [make_episode("a", "2024-06-16")]
        assert average_occupancy(eps, 1, date(2024, 6, 16), date(2024, 6, 30)) == 50.0

    def test_over_capacity_allowed(self, make_episode):
        eps = [make_episode(str(i), "2024-06-01") for i in range(3)]
        assert average_occupancy(eps, 2, date(2024, 6, 1), date(2024, 6, 30)) == 150.0

    def test_rounded_to_one_decimal(self, make_episode):
        eps = [make_episode("a", "2024-06-01", "2024-06-10")]
        # 10/30 days at 1/3 -> 11.111...
        assert average_occupancy(eps, 3, date(2024, 6, 1), date(2024, 6, 30)) == 11.1

    def test_empty_dataset(self):
        assert average_occupancy([], 10, date(2024, 6, 1), date(2024, 6, 30)) == 0.0

    def test_zero_or_negative_capacity(self, make_episode):
        eps = [make_episode("a", "2024-06-01")]
        assert average_occupancy(eps, 0, date(2024, 6, 1), date(2024, 6, 30)) == 0.0
        assert average_occupancy(eps, -5, date(2024, 6, 1), date(2024, 6, 30)) == 0.0

    def test_start_after_end(self, make_episode):
        eps = [make_episode("a", "2024-06-01")]
        assert average_occupancy(eps, 10, floor_date=date(2024, 1, 1), today=date(2024, 6, 10)) == 0.0

    def test_ignores_incoherent_dates(self, make_episode):
        eps = [make_episode("a", "2024-06-20", "2024-06-01"), make_episode("b", None)]
        assert average_occupancy(eps, 10, date(2024, 6, 1), date(2024, 6, 30)) == 0.0

    def test_non_negative_and_deterministic(self, make_episode):
        eps = [
            make_episode("a", "2024-05-03", "2024-06-12"),
            make_episode("b", "2024-06-07"),
            make_episode("c", "2024-04-20", "2024-05-02", known=False),
        ]
        first = average_occupancy(eps, 16, date(2024, 4, 1), date(2024, 6, 30))
        second = average_occupancy(eps, 16, date(2024, 4, 1), date(2024, 6, 30))
        assert first >= 0
        assert first == second


class TestMonthlyOccupancy:
    def test_series(self, make_episode):
        eps = [make_episode("a", "2024-06-01")]
        rows = monthly_occupancy(eps, 10, date(2024, 6, 1), date(2024, 7, 31))
        assert rows == [
            {"name": "06/24", "month": "2024-06", "value": 10.0},
            {"name": "07/24", "month": "2024-07", "value": 10.0},
        ]

    def test_guards(self, make_episode):
        eps = [make_episode("a", "2024-06-01")]
        assert monthly_occupancy(eps, 0, date(2024, 6, 1), date(2024, 6, 30)) == []
        assert monthly_occupancy(eps, 10, date(2024, 7, 1), date(2024, 6, 30)) == []


class TestCurrentOccupancy:
    def test_counts_open_unique_patients(self, make_episode):
        eps = [
            make_episode("a", "2024-06-01"),
            make_episode("a", "2024-06-03"),
            make_episode("b", "2024-06-01", "2024-06-05"),
            make_episode("c", "2024-06-01"),
        ]
        assert current_occupancy(eps) == 2

    def test_empty(self):
        assert current_occupancy([]) == 0
