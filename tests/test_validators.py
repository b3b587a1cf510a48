"""Tests for validators and FetchParams."""

import operator

import pytest

from stock_consensus.utils.validators import (
    VALID_INTERVALS,
    VALID_PERIODS,
    FetchParams,
    check_rule,
)


class TestFetchParams:
    """Tests for FetchParams dataclass."""

    def test_symbol_normalization(self) -> None:
        """Test symbol is upper-cased and stripped."""
        params = FetchParams(symbol="  nvda  ")
        assert params.symbol == "NVDA"

    def test_defaults(self) -> None:
        """Test one year of daily adjusted bars by default."""
        params = FetchParams(symbol="AAPL")
        assert (params.period, params.interval, params.adjusted) == ("1y", "1d", True)

    def test_period_and_interval_normalization(self) -> None:
        """Test period and interval are lower-cased."""
        params = FetchParams(symbol="AAPL", period="1Y", interval="1D")
        assert params.period == "1y"
        assert params.interval == "1d"

    def test_invalid_period_raises(self) -> None:
        """Test invalid period raises ValueError."""
        with pytest.raises(ValueError, match="Invalid period"):
            FetchParams(symbol="AAPL", period="invalid")

    def test_invalid_interval_raises(self) -> None:
        """Test invalid interval raises ValueError."""
        with pytest.raises(ValueError, match="Invalid interval"):
            FetchParams(symbol="AAPL", interval="invalid")

    def test_all_valid_values(self) -> None:
        """Test every listed period and interval is accepted."""
        for period in VALID_PERIODS:
            assert FetchParams(symbol="AAPL", period=period).period == period
        for interval in VALID_INTERVALS:
            assert FetchParams(symbol="AAPL", interval=interval).interval == interval

    def test_to_yf_kwargs(self) -> None:
        """Test yfinance kwargs generation."""
        kwargs = FetchParams(symbol="AAPL", adjusted=False).to_yf_kwargs()

        assert kwargs["tickers"] == "AAPL"
        assert kwargs["period"] == "1y"
        assert kwargs["interval"] == "1d"
        assert kwargs["auto_adjust"] is False
        assert kwargs["progress"] is False

    def test_immutable(self) -> None:
        """Test FetchParams is immutable."""
        params = FetchParams(symbol="AAPL")

        with pytest.raises(AttributeError):
            params.symbol = "NVDA"


class TestCheckRule:
    """Tests for check_rule function."""

    def test_check_rule_true(self) -> None:
        """Test rule that triggers."""
        assert check_rule(0.5, 0.3) is True

    def test_check_rule_false(self) -> None:
        """Test rule that doesn't trigger."""
        assert check_rule(0.2, 0.3, operator.gt) is False

    def test_check_rule_none_value(self) -> None:
        """Test rule with None value returns None (not False)."""
        assert check_rule(None, 0.3, operator.gt) is None

    def test_check_rule_lt_operator(self) -> None:
        """Test rule with less-than operator."""
        assert check_rule(0.2, 0.3, operator.lt) is True
