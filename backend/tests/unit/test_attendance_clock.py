from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from rollcall.domain.attendance.clock import next_midnight, seconds_until_next_midnight
from rollcall.domain.attendance.models import RunDates

IST = ZoneInfo("Asia/Kolkata")


def test_seconds_until_midnight_from_late_evening():
	now = datetime(2024, 3, 14, 23, 59, 30, tzinfo=IST)
	assert seconds_until_next_midnight(now, IST) == 30.0


def test_exact_midnight_waits_a_full_day():
	now = datetime(2024, 3, 15, 0, 0, 0, tzinfo=IST)
	assert next_midnight(now, IST) == datetime(2024, 3, 16, tzinfo=IST)
	assert seconds_until_next_midnight(now, IST) == 86400.0


def test_instant_in_other_zone_is_converted_first():
	# 18:40 UTC is 00:10 IST on the next calendar day
	now = datetime(2024, 3, 14, 18, 40, tzinfo=timezone.utc)
	assert next_midnight(now, IST) == datetime(2024, 3, 16, tzinfo=IST)
	assert seconds_until_next_midnight(now, IST) == pytest.approx(timedelta(hours=23, minutes=50).total_seconds())


def test_dst_day_is_shorter():
	new_york = ZoneInfo("America/New_York")
	now = datetime(2024, 3, 10, 0, 30, tzinfo=new_york)
	assert seconds_until_next_midnight(now, new_york) == timedelta(hours=22, minutes=30).total_seconds()


def test_naive_instant_rejected():
	with pytest.raises(ValueError):
		seconds_until_next_midnight(datetime(2024, 3, 14, 12, 0), IST)


def test_run_dates_use_the_fixed_timezone():
	# Still March 31 in UTC, already April 1 in IST
	dates = RunDates.at(datetime(2024, 3, 31, 18, 45, tzinfo=timezone.utc), IST)
	assert dates.today == date(2024, 4, 1)
	assert dates.yesterday == date(2024, 3, 31)
	assert dates.month_start == date(2024, 4, 1)
	assert dates.is_month_start


def test_run_dates_mid_month():
	dates = RunDates.at(datetime(2024, 2, 15, 0, 0, 5, tzinfo=IST), IST)
	assert dates == RunDates(today=date(2024, 2, 15), yesterday=date(2024, 2, 14), month_start=date(2024, 2, 1))
	assert not dates.is_month_start


def test_run_dates_across_year_boundary():
	dates = RunDates.at(datetime(2025, 1, 1, 0, 0, 1, tzinfo=IST), IST)
	assert dates.yesterday == date(2024, 12, 31)
	assert dates.month_start == date(2025, 1, 1)


def test_run_dates_reject_naive_instant():
	with pytest.raises(ValueError):
		RunDates.at(datetime(2024, 2, 15), IST)
