"""Tests for cost calculator functions."""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal


T0 = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def make_entry(entry_id, project_id=1, minutes=60, rate="85", task_id=None, active=False, start=T0):
    """Build a stopped (or running) time entry."""
    from timebill.models.time_entry import TimeEntry
    from timebill.services.cost_calculator import calculate_cost

    return TimeEntry(
        id=entry_id,
        project_id=project_id,
        task_id=task_id,
        start_time=start,
        end_time=None if active else start + timedelta(minutes=minutes),
        duration_minutes=0 if active else minutes,
        hourly_rate=Decimal(rate),
        total_cost=Decimal("0.00") if active else calculate_cost(minutes, Decimal(rate)),
        is_active=active,
        created_at=start,
        updated_at=start,
    )


class TestDuration:
    """Tests for duration calculation."""

    def test_whole_minutes(self):
        """Test exact minutes are kept."""
        from timebill.services.cost_calculator import calculate_duration_minutes

        assert calculate_duration_minutes(T0, T0 + timedelta(minutes=90)) == 90

    def test_partial_minute_rounds_up(self):
        """Test any started minute counts."""
        from timebill.services.cost_calculator import calculate_duration_minutes

        assert calculate_duration_minutes(T0, T0 + timedelta(seconds=1)) == 1
        assert calculate_duration_minutes(T0, T0 + timedelta(minutes=5, microseconds=1)) == 6

    def test_zero_and_negative(self):
        """Test empty or inverted spans are zero."""
        from timebill.services.cost_calculator import calculate_duration_minutes

        assert calculate_duration_minutes(T0, T0) == 0
        assert calculate_duration_minutes(T0, T0 - timedelta(minutes=3)) == 0


class TestCost:
    """Tests for cost and tax calculation."""

    def test_cost_example(self):
        """Test 90 minutes at 85/hour."""
        from timebill.services.cost_calculator import calculate_cost

        assert calculate_cost(90, Decimal("85")) == Decimal("127.50")

    @pytest.mark.parametrize(
        "minutes,rate,expected",
        [
            (0, "85", "0.00"),
            (1, "85", "1.42"),  # 1.41666...
            (7, "100", "11.67"),  # 11.666...
            (60, "0", "0.00"),
            (45, "99.99", "74.99"),  # 74.9925
        ],
    )
    def test_cost_rounds_to_cents(self, minutes, rate, expected):
        """Test cost is rounded half up to cents."""
        from timebill.services.cost_calculator import calculate_cost

        assert calculate_cost(minutes, Decimal(rate)) == Decimal(expected)

    def test_tax(self):
        """Test flat tax is rounded to cents."""
        from timebill.services.cost_calculator import calculate_tax

        assert calculate_tax(Decimal("127.50"), Decimal("0.1")) == Decimal("12.75")
        assert calculate_tax(Decimal("10.05"), Decimal("0.05")) == Decimal("0.50")
        assert calculate_tax(Decimal("100"), Decimal("0")) == Decimal("0.00")

    def test_round_money_half_up(self):
        """Test halves round away from zero."""
        from timebill.services.cost_calculator import round_money

        assert round_money(Decimal("0.005")) == Decimal("0.01")
        assert round_money(Decimal("2.675")) == Decimal("2.68")


class TestSummarize:
    """Tests for global statistics."""

    def test_empty(self):
        """Test statistics of nothing."""
        from timebill.services.cost_calculator import summarize

        stats = summarize([], {})

        assert stats.total_hours == Decimal("0.00")
        assert stats.total_revenue == Decimal("0.00")
        assert stats.average_hourly_rate == Decimal("0.00")
        assert stats.top_project == "None"
        assert stats.efficiency == 0

    def test_totals_and_effective_rate(self):
        """Test average rate is revenue per hour, not mean of rates."""
        from timebill.services.cost_calculator import summarize

        entries = [
            make_entry(1, minutes=60, rate="100"),
            make_entry(2, minutes=180, rate="50"),
        ]

        stats = summarize(entries, {})

        assert stats.total_hours == Decimal("4.00")
        assert stats.total_revenue == Decimal("250.00")
        # mean of rates would be 75
        assert stats.average_hourly_rate == Decimal("62.50")

    def test_excludes_running_entries(self):
        """Test running timers are not counted."""
        from timebill.services.cost_calculator import summarize

        entries = [make_entry(1, minutes=30), make_entry(2, active=True)]

        stats = summarize(entries, {})

        assert stats.total_hours == Decimal("0.50")
        assert stats.efficiency == 0

    def test_top_project_and_efficiency(self):
        """Test top project by minutes and share of entries with a task."""
        from timebill.services.cost_calculator import summarize

        entries = [
            make_entry(1, project_id=1, minutes=30, task_id=10),
            make_entry(2, project_id=2, minutes=120),
            make_entry(3, project_id=1, minutes=60, task_id=11),
        ]

        stats = summarize(entries, {1: "Website", 2: "Mobile App"})

        assert stats.top_project == "Mobile App"
        assert stats.efficiency == 67

    def test_top_project_without_directory_name(self):
        """Test unknown projects are labelled by id."""
        from timebill.services.cost_calculator import summarize

        stats = summarize([make_entry(1, project_id=42)], {})

        assert stats.top_project == "Project 42"


class TestProjectBreakdown:
    """Tests for per-project statistics."""

    def test_breakdown_sorted_by_hours(self):
        """Test projects are sorted and tasks broken out."""
        from timebill.services.cost_calculator import project_breakdown

        entries = [
            make_entry(1, project_id=1, minutes=30, task_id=10),
            make_entry(2, project_id=2, minutes=120),
            make_entry(3, project_id=1, minutes=60, task_id=10),
            make_entry(4, project_id=1, minutes=15),
        ]

        stats = project_breakdown(entries, {1: "Website"}, {10: "Login page"})

        assert [s.project_id for s in stats] == [2, 1]
        website = stats[1]
        assert website.project_name == "Website"
        assert website.total_hours == Decimal("1.75")
        assert website.total_cost == Decimal("148.75")
        assert len(website.task_breakdown) == 1
        task = website.task_breakdown[0]
        assert task.task_id == 10
        assert task.task_name == "Login page"
        assert task.hours == Decimal("1.50")
        assert task.cost == Decimal("127.50")
        assert stats[0].project_name is None
        assert stats[0].task_breakdown == []

    def test_breakdown_skips_running(self):
        """Test running entries do not create project rows."""
        from timebill.services.cost_calculator import project_breakdown

        assert project_breakdown([make_entry(1, active=True)], {}, {}) == []


class TestSumCosts:
    """Tests for cost sums and timesheet summaries."""

    def test_sum_costs(self):
        """Test sum of entry costs."""
        from timebill.services.cost_calculator import sum_costs

        entries = [make_entry(1, minutes=90), make_entry(2, minutes=60)]

        assert sum_costs(entries) == Decimal("212.50")
        assert sum_costs([]) == Decimal("0.00")

    def test_timesheet_summary(self):
        """Test timesheet totals."""
        from timebill.services.cost_calculator import summarize_timesheet

        summary = summarize_timesheet([make_entry(1, minutes=90), make_entry(2, minutes=60)])

        assert summary.total_hours == Decimal("2.50")
        assert summary.total_cost == Decimal("212.50")
        assert summary.entries_count == 2
