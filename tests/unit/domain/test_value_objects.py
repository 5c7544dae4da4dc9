"""Tests for the Duration value object."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from push_channel.domain.value_objects import Duration


class TestDuration:
    def test_conversions(self):
        assert Duration.from_milliseconds(1500).seconds == 1.5
        assert Duration.from_minutes(2).seconds == 120
        assert Duration.from_timedelta(timedelta(seconds=30)).seconds == 30
        assert Duration(seconds=30.0).to_timedelta() == timedelta(seconds=30)
        assert Duration(seconds=30.0).total_seconds() == 30.0

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            Duration(seconds=-1.0)

    def test_ordering_and_equality(self):
        short = Duration(seconds=10.0)
        long = Duration(seconds=30.0)

        assert short < long
        assert long > short
        assert short <= Duration(seconds=10.0)
        assert long >= short
        assert short == Duration(seconds=10.0)
        assert short != long
        assert str(long) == "30s"
