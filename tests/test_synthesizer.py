"""Tests for the synthetic price series generator."""

import numpy as np
import pytest

from stockdash.core.exceptions import InvalidInputError
from stockdash.domain.entities import RANGE_SHAPES, RangeCode
from stockdash.domain.synthesizer import SeriesSynthesizer, SynthesizerConfig
from .utils import FakeClock, make_reference

ALL_RANGES = list(RangeCode)
TOLERANCE = 1e-9


class TestSeriesInvariants:
    """Properties that must hold for every generated series."""

    def setup_method(self):
        self.synthesizer = SeriesSynthesizer()

    @pytest.mark.parametrize("range_code", ALL_RANGES)
    def test_last_close_is_current_price(self, range_code):
        reference = make_reference(price=185.92)
        for _ in range(10):
            series = self.synthesizer.synthesize(reference, range_code)
            assert series.last.close == 185.92

    @pytest.mark.parametrize("range_code", ALL_RANGES)
    def test_length_matches_range_table(self, range_code):
        series = self.synthesizer.synthesize(make_reference(), range_code)
        assert len(series) == RANGE_SHAPES[range_code].points

    def test_known_lengths(self):
        assert len(self.synthesizer.synthesize(make_reference(), "1M")) == 22
        assert len(self.synthesizer.synthesize(make_reference(), "1Y")) == 52

    @pytest.mark.parametrize("range_code", ALL_RANGES)
    def test_timestamps_strictly_increase(self, range_code):
        series = self.synthesizer.synthesize(make_reference(), range_code)
        timestamps = [p.timestamp for p in series]
        assert all(b > a for a, b in zip(timestamps, timestamps[1:]))

    @pytest.mark.parametrize("range_code", ALL_RANGES)
    def test_bars_are_consistent(self, range_code):
        reference = make_reference(price=118.71, low_52_week=41.04)
        for _ in range(20):
            for p in self.synthesizer.synthesize(reference, range_code):
                assert p.low <= p.open + TOLERANCE
                assert p.open <= p.high + TOLERANCE
                assert p.low <= p.close + TOLERANCE
                assert p.close <= p.high + TOLERANCE
                assert p.low >= 0

    @pytest.mark.parametrize("range_code", ALL_RANGES)
    def test_volume_within_average_volume(self, range_code):
        reference = make_reference(avg_volume=1_000_000)
        for p in self.synthesizer.synthesize(reference, range_code):
            assert 0 <= p.volume <= 1_000_000
            assert isinstance(p.volume, int)

    def test_volume_falls_back_to_volume_then_default(self):
        by_volume = self.synthesizer.synthesize(make_reference(avg_volume=None, volume=5000), "1M")
        assert all(0 <= p.volume <= 5000 for p in by_volume)

        default = SynthesizerConfig().default_volume
        by_default = self.synthesizer.synthesize(make_reference(avg_volume=None, volume=None), "1M")
        assert all(0 <= p.volume <= default for p in by_default)

    def test_negative_volumes_fall_back_to_default(self):
        reference = make_reference(avg_volume=-1000, volume=-5)
        default = SynthesizerConfig().default_volume
        for p in self.synthesizer.synthesize(reference, "1M"):
            assert 0 <= p.volume <= default

    def test_closes_are_rounded_to_cents(self):
        series = self.synthesizer.synthesize(make_reference(), "1Y")
        for p in series.points[:-1]:
            assert round(p.close, 2) == p.close

    def test_output_varies_between_calls(self):
        reference = make_reference()
        first = [p.close for p in self.synthesizer.synthesize(reference, "1Y")]
        second = [p.close for p in self.synthesizer.synthesize(reference, "1Y")]
        assert first[-1] == second[-1]
        assert first != second


class TestRangeHandling:
    """Range code parsing and spacing."""

    def setup_method(self):
        self.clock = FakeClock(1_700_000_000)
        self.synthesizer = SeriesSynthesizer(clock=self.clock)

    def test_one_month_scenario(self):
        reference = make_reference(price=185.92, low_52_week=141.39)
        series = self.synthesizer.synthesize(reference, "1M")

        assert len(series) == 22
        timestamps = [p.timestamp for p in series]
        assert all(b - a == 86400 for a, b in zip(timestamps, timestamps[1:]))
        assert series.last.close == 185.92
        assert series.last.timestamp == 1_700_000_000

    @pytest.mark.parametrize("raw", ["7W", "bogus", "", None])
    def test_unknown_or_missing_range_uses_default_shape(self, raw):
        series = self.synthesizer.synthesize(make_reference(), raw)
        timestamps = [p.timestamp for p in series]

        assert len(series) == 22
        assert timestamps[1] - timestamps[0] == 86400

    def test_range_is_case_insensitive(self):
        lower = self.synthesizer.synthesize(make_reference(), "5y")
        assert len(lower) == RANGE_SHAPES[RangeCode.FIVE_YEARS].points

    def test_intraday_spacing(self):
        series = self.synthesizer.synthesize(make_reference(), RangeCode.ONE_DAY)
        timestamps = [p.timestamp for p in series]
        assert timestamps[1] - timestamps[0] == 10 * 60
        assert timestamps[-1] - timestamps[0] == 38 * 10 * 60


class TestStartingAnchor:
    """Growth and decline scenarios for long ranges."""

    def setup_method(self):
        self.synthesizer = SeriesSynthesizer()

    def test_growth_branch_for_five_years(self):
        reference = make_reference(price=200.0, low_52_week=50.0)

        assert self.synthesizer.trend_multiplier(reference, RangeCode.FIVE_YEARS) == 0.4
        assert self.synthesizer.starting_anchor(reference, RangeCode.FIVE_YEARS) == pytest.approx(80.0)

        series = self.synthesizer.synthesize(reference, "5Y")
        # Oldest bar sits on the interpolated anchor: 200 * (0.4 * 59/60 + 1/60)
        assert series.first.close == pytest.approx(82.0, abs=0.01)
        assert series.first.close < 100.0

    def test_decline_branch_when_price_near_low(self):
        reference = make_reference(price=100.0, low_52_week=90.0)

        assert self.synthesizer.trend_multiplier(reference, RangeCode.TEN_YEARS) == 1.4
        series = self.synthesizer.synthesize(reference, RangeCode.TEN_YEARS)
        assert series.first.close == pytest.approx(100.0 * (1.4 * 119 / 120 + 1 / 120), abs=0.01)

    def test_missing_low_uses_decline_branch(self):
        reference = make_reference(price=100.0, low_52_week=None)
        assert self.synthesizer.trend_multiplier(reference, RangeCode.MAX) == 1.4

    @pytest.mark.parametrize("range_code", [RangeCode.ONE_DAY, RangeCode.FIVE_DAYS, RangeCode.ONE_MONTH, RangeCode.ONE_YEAR])
    def test_short_ranges_start_at_price(self, range_code):
        reference = make_reference(price=200.0, low_52_week=50.0)

        assert self.synthesizer.trend_multiplier(reference, range_code) == 1.0
        assert self.synthesizer.synthesize(reference, range_code).first.close == 200.0

    def test_price_outside_52_week_band_does_not_crash(self):
        reference = make_reference(price=500.0, low_52_week=600.0, high_52_week=700.0)
        series = self.synthesizer.synthesize(reference, "MAX")
        assert series.last.close == 500.0


class TestReproducibility:
    """Injected generator and configuration."""

    def test_same_seed_same_series(self):
        clock = FakeClock()
        first = SeriesSynthesizer(clock=clock, rng=np.random.default_rng(7)).synthesize(make_reference(), "1Y")
        second = SeriesSynthesizer(clock=clock, rng=np.random.default_rng(7)).synthesize(make_reference(), "1Y")
        assert first == second

    def test_zero_volatility_is_flat_for_short_ranges(self):
        synthesizer = SeriesSynthesizer(SynthesizerConfig(volatility=0.0))
        series = synthesizer.synthesize(make_reference(price=50.0), "1M")
        assert {p.close for p in series} == {50.0}


class TestInvalidInput:

    def test_missing_reference(self):
        with pytest.raises(InvalidInputError):
            SeriesSynthesizer().synthesize(None, "1M")

    def test_raw_dict_is_rejected(self):
        with pytest.raises(InvalidInputError):
            SeriesSynthesizer().synthesize({"symbol": "AAPL"}, "1M")

    def test_negative_price_is_rejected(self):
        with pytest.raises(InvalidInputError):
            SeriesSynthesizer().synthesize(make_reference(price=-10.0), "1M")
