"""Unit tests for transit feasibility.

Tests cover:
1. Time breakdown arithmetic (overhead, baggage, negative city time)
2. Leave-airport verdict and flooring of reported city time
3. Transit option filtering (operating hours, local time, wraparound)
4. Default airport profile for unknown codes
5. Confidence scoring
6. Per-experience fit and suitability
"""

from datetime import UTC, datetime, time

from backend.discovery.models import (
    OperatingHours,
    PhysicalDemand,
    TransitConfig,
    TransitMode,
    TransitOption,
)
from backend.discovery.transit.analyzer import (
    analyze_layover,
    assess_experience_fit,
    calculate_time_breakdown,
    filter_transit_options,
    minimum_layover_required,
)

ARRIVAL = datetime(2026, 3, 10, 8, 0, tzinfo=UTC)


def make_option(minutes: int, start: time, end: time, mode: TransitMode = TransitMode.metro):
    return TransitOption(
        mode=mode,
        duration_minutes=minutes,
        operating_hours=OperatingHours(start=start, end=end),
    )


class TestTimeBreakdown:
    """Test the minute budget of a layover."""

    def test_short_layover_at_fast_airport_stays_airside(self, make_airport) -> None:
        """90 minutes with 45 minutes of overhead leaves 45 in the city: too little."""
        airport = make_airport(customs=5, security=0, walking=0, transit_minutes=5)

        analysis = analyze_layover("TST", 90, ARRIVAL, airports={"TST": airport})

        assert analysis.available_time_in_city_minutes == 45
        assert analysis.can_leave_airport is False
        assert analysis.breakdown is not None
        assert analysis.breakdown.total_overhead == 45

    def test_long_layover_leaves_five_hours(self, make_airport) -> None:
        """480 minutes with 180 minutes of overhead leaves 300 in the city."""
        airport = make_airport()

        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": airport})

        assert analysis.available_time_in_city_minutes == 300
        assert analysis.can_leave_airport is True
        assert [o.mode for o in analysis.transit_options] == [TransitMode.train]

    def test_checked_baggage_adds_handling_time(self, make_airport) -> None:
        airport = make_airport()

        analysis = analyze_layover(
            "TST", 480, ARRIVAL, has_checked_baggage=True, airports={"TST": airport}
        )

        assert analysis.available_time_in_city_minutes == 270
        assert "Checked baggage adds complexity - consider carry-on only" in analysis.warnings

    def test_negative_city_time_is_floored_in_analysis(self, make_airport) -> None:
        """Raw breakdown keeps the deficit; the reported figure never goes below 0."""
        airport = make_airport()

        analysis = analyze_layover("TST", 100, ARRIVAL, airports={"TST": airport})

        assert analysis.breakdown is not None
        assert analysis.breakdown.available_in_city == -80
        assert analysis.available_time_in_city_minutes == 0
        assert analysis.can_leave_airport is False
        assert analysis.transit_options == []

    def test_breakdown_components(self, make_airport) -> None:
        breakdown = calculate_time_breakdown(480, make_airport(), False, TransitConfig())

        assert breakdown.buffer == 30
        assert breakdown.customs_and_immigration == 30
        assert breakdown.security_recheck == 40
        assert breakdown.walk_to_from_gates == 30
        assert breakdown.transit_to_city == 25
        assert breakdown.transit_from_city == 25
        assert breakdown.baggage == 0
        assert breakdown.is_viable is True

    def test_exactly_minimum_city_time_is_viable(self, make_airport) -> None:
        """240 minutes at a 180-minute-overhead airport leaves exactly 60."""
        analysis = analyze_layover("TST", 240, ARRIVAL, airports={"TST": make_airport()})

        assert analysis.available_time_in_city_minutes == 60
        assert analysis.can_leave_airport is True

    def test_minimum_layover_required(self, make_airport) -> None:
        assert minimum_layover_required(make_airport(), TransitConfig()) == 240

    def test_custom_config_changes_allowances(self, make_airport) -> None:
        config = TransitConfig(buffer_minutes=60, minimum_city_minutes=120)

        analysis = analyze_layover(
            "TST", 300, ARRIVAL, airports={"TST": make_airport()}, config=config
        )

        assert analysis.available_time_in_city_minutes == 90
        assert analysis.can_leave_airport is False


class TestTransitOptions:
    """Test option filtering by hours and remaining time."""

    def test_operating_hours_wrap_past_midnight(self) -> None:
        hours = OperatingHours(start=time(22, 0), end=time(2, 0))

        assert hours.covers_hour(23) is True
        assert hours.covers_hour(1) is True
        assert hours.covers_hour(12) is False

    def test_options_sorted_fastest_first(self) -> None:
        options = [
            make_option(40, time(0, 0), time(23, 59), TransitMode.bus),
            make_option(20, time(0, 0), time(23, 59), TransitMode.taxi),
            make_option(20, time(0, 0), time(23, 59), TransitMode.metro),
        ]

        viable = filter_transit_options(options, 12, 300, TransitConfig())

        assert [(o.duration_minutes, o.mode) for o in viable] == [
            (20, TransitMode.metro),
            (20, TransitMode.taxi),
            (40, TransitMode.bus),
        ]

    def test_option_excluded_when_round_trip_eats_city_time(self) -> None:
        """A 60-minute option needs 120 + 60 minutes of city time."""
        options = [make_option(60, time(0, 0), time(23, 59))]

        assert filter_transit_options(options, 12, 179, TransitConfig()) == []
        assert len(filter_transit_options(options, 12, 180, TransitConfig())) == 1

    def test_closed_option_excluded(self) -> None:
        options = [make_option(20, time(6, 0), time(22, 0))]

        assert filter_transit_options(options, 3, 300, TransitConfig()) == []

    def test_hours_checked_in_airport_local_time(self, make_airport) -> None:
        """08:00 UTC is 12:00 in Dubai, inside a 10:00-14:00 service window."""
        airport = make_airport(
            timezone="Asia/Dubai",
            transit_options=[make_option(25, time(10, 0), time(14, 0))],
        )

        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": airport})

        assert len(analysis.transit_options) == 1

    def test_unknown_timezone_uses_arrival_hour(self, make_airport) -> None:
        airport = make_airport(
            timezone="Mars/Olympus_Mons",
            transit_options=[make_option(25, time(10, 0), time(14, 0))],
        )

        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": airport})

        assert analysis.transit_options == []


class TestDefaultProfile:
    """Test the conservative profile used for unknown airports."""

    def test_unknown_airport_uses_default_profile(self) -> None:
        analysis = analyze_layover("zzz", 480, ARRIVAL, airports={})

        assert analysis.airport_code == "ZZZ"
        assert analysis.used_default_profile is True
        assert analysis.minimum_layover_required_minutes == 255
        assert analysis.available_time_in_city_minutes == 285
        assert any("No transit data for ZZZ" in w for w in analysis.warnings)

    def test_default_profile_has_no_express_bonus(self) -> None:
        """Options +0.2, buffer +0.1, clear-cut verdict +0.1."""
        analysis = analyze_layover("ZZZ", 480, ARRIVAL)

        assert analysis.confidence == 0.9


class TestConfidence:
    """Test confidence in the feasibility verdict."""

    def test_comfortable_layover(self, make_airport) -> None:
        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": make_airport()})
        assert analysis.confidence == 0.9

    def test_express_transit_raises_confidence(self, make_airport) -> None:
        airport = make_airport(has_express_transit=True)
        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": airport})
        assert analysis.confidence == 1.0

    def test_borderline_layover_is_less_certain(self, make_airport) -> None:
        """90 minutes in the city is neither clearly enough nor clearly too little."""
        analysis = analyze_layover("TST", 270, ARRIVAL, airports={"TST": make_airport()})
        assert analysis.confidence == 0.8


class TestExperienceFit:
    """Test whether single experiences fit the layover."""

    def test_reachable_experience_in_long_layover(self, make_airport) -> None:
        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": make_airport()})

        fit = assess_experience_fit(120, analysis, 480)

        assert fit.can_reach is True
        assert fit.travel_minutes == 25
        assert fit.total_time_required == 200
        assert fit.minimum_layover_required == 260
        assert fit.ideal is True
        assert fit.suitability_score == 1.0

    def test_experience_longer_than_city_time_is_unreachable(self, make_airport) -> None:
        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": make_airport()})

        fit = assess_experience_fit(250, analysis, 480)

        assert fit.can_reach is False
        assert fit.suitability_score == 0.0
        assert fit.ideal is False
        assert fit.reasons[0] == "Cannot be completed within the available time"

    def test_infeasible_layover_blocks_city_experiences(self, make_airport) -> None:
        analysis = analyze_layover("TST", 90, ARRIVAL, airports={"TST": make_airport()})

        fit = assess_experience_fit(60, analysis, 90)

        assert fit.can_reach is False
        assert fit.suitability_score == 0.0
        assert fit.reasoning == "Insufficient layover time to leave airport"

    def test_airport_experience_needs_no_transit(self, make_airport) -> None:
        analysis = analyze_layover("TST", 150, ARRIVAL, airports={"TST": make_airport()})

        fit = assess_experience_fit(60, analysis, 150, airport_based=True)

        assert fit.can_reach is True
        assert fit.travel_minutes == 0
        assert fit.total_time_required == 90

    def test_tight_schedule_reduces_suitability(self, make_airport) -> None:
        """20-minute experience needs 100 minutes; 180 is under 30 past the 160 minimum."""
        analysis = analyze_layover("TST", 280, ARRIVAL, airports={"TST": make_airport()})
        assert analysis.available_time_in_city_minutes == 100

        fit = assess_experience_fit(20, analysis, 180)

        assert fit.can_reach is True
        assert fit.minimum_layover_required == 160
        assert fit.suitability_score == 0.6
        assert "Tight schedule - minimal buffer time" in fit.reasons

    def test_adequate_schedule(self, make_airport) -> None:
        analysis = analyze_layover("TST", 280, ARRIVAL, airports={"TST": make_airport()})

        fit = assess_experience_fit(20, analysis, 200)

        assert fit.suitability_score == 0.8
        assert fit.ideal is False

    def test_high_demand_on_short_layover_penalized(self, make_airport) -> None:
        analysis = analyze_layover("TST", 480, ARRIVAL, airports={"TST": make_airport()})

        relaxed = assess_experience_fit(60, analysis, 480, physical_demand=PhysicalDemand.high)
        rushed = assess_experience_fit(60, analysis, 290, physical_demand=PhysicalDemand.high)

        assert relaxed.suitability_score == 1.0
        assert rushed.suitability_score == 0.8
