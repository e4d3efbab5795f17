"""Tests for schedule descriptor construction and the flat-field conversion."""

import pytest

from cadence.core.descriptor import (
    Custom,
    Daily,
    Frequency,
    Monthly,
    Quarterly,
    TimeOfDay,
    Weekly,
    descriptor_from_fields,
    zone_for,
)
from cadence.core.errors import CronSyntaxError, DescriptorError


def test_time_of_day_parses_and_formats():
    parsed = TimeOfDay.parse("9:05")
    assert parsed == TimeOfDay(9, 5)
    assert str(parsed) == "09:05"


@pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "12", "12:xx", "-1:00", ""])
def test_time_of_day_rejects_bad_text(text):
    with pytest.raises(DescriptorError):
        TimeOfDay.parse(text)


@pytest.mark.parametrize("text", ["１２:００", "١٢:٠٠", "12:5", "123:00"])
def test_time_of_day_accepts_only_ascii_hh_mm(text):
    with pytest.raises(DescriptorError, match="HH:MM"):
        TimeOfDay.parse(text)


def test_time_of_day_rejects_booleans():
    with pytest.raises(DescriptorError):
        TimeOfDay(True, 0)


def test_descriptor_coerces_time_strings():
    daily = Daily(time="07:30", time_zone="Europe/Paris")
    assert daily.time == TimeOfDay(7, 30)
    assert daily.frequency is Frequency.DAILY


@pytest.mark.parametrize(
    "factory",
    [
        lambda: Weekly(time="09:00", day_of_week=7),
        lambda: Weekly(time="09:00", day_of_week=-1),
        lambda: Monthly(time="09:00", day_of_month=0),
        lambda: Monthly(time="09:00", day_of_month=32),
        lambda: Quarterly(time="09:00", day_of_month=40),
        lambda: Daily(time=930),
        lambda: Daily(time="09:00", time_zone="Mars/Olympus_Mons"),
        lambda: Custom(cron_expression="0 2 * * *", time_zone=""),
    ],
)
def test_variants_enforce_field_invariants(factory):
    with pytest.raises(DescriptorError):
        factory()


def test_custom_keeps_expression_unvalidated():
    descriptor = Custom(cron_expression="not a cron")
    assert descriptor.cron_expression == "not a cron"
    assert descriptor.time_zone == "UTC"


def test_zone_for_rejects_unknown_zone():
    with pytest.raises(DescriptorError, match="unknown time zone"):
        zone_for("Nowhere/Special")


def test_from_fields_builds_each_variant():
    assert descriptor_from_fields("daily", time="08:00") == Daily(time=TimeOfDay(8, 0))
    assert descriptor_from_fields(
        Frequency.WEEKLY, time="09:00", day_of_week=1, time_zone="America/New_York"
    ) == Weekly(time=TimeOfDay(9, 0), day_of_week=1, time_zone="America/New_York")
    assert descriptor_from_fields("MONTHLY", time="18:00", day_of_month=31) == Monthly(
        time=TimeOfDay(18, 0), day_of_month=31
    )
    assert descriptor_from_fields(" quarterly ", time="10:00", day_of_month=1) == Quarterly(
        time=TimeOfDay(10, 0), day_of_month=1
    )
    assert descriptor_from_fields("CUSTOM", cron_expression="0 2 * * *") == Custom(
        cron_expression="0 2 * * *"
    )


def test_from_fields_ignores_irrelevant_fields():
    descriptor = descriptor_from_fields(
        "DAILY", time="06:00", day_of_week=3, day_of_month=12, cron_expression="bogus"
    )
    assert descriptor == Daily(time=TimeOfDay(6, 0))


@pytest.mark.parametrize(
    "frequency, fields, message",
    [
        ("HOURLY", {"time": "09:00"}, "frequency must be one of"),
        (None, {"time": "09:00"}, "frequency must be one of"),
        ("DAILY", {}, "time is required"),
        ("WEEKLY", {"time": "09:00"}, "day_of_week is required"),
        ("MONTHLY", {"time": "09:00"}, "day_of_month is required"),
        ("QUARTERLY", {"time": "09:00"}, "day_of_month is required"),
        ("CUSTOM", {}, "cron_expression is required"),
    ],
)
def test_from_fields_requires_frequency_fields(frequency, fields, message):
    with pytest.raises(DescriptorError, match=message):
        descriptor_from_fields(frequency, **fields)


def test_from_fields_rejects_malformed_cron():
    with pytest.raises(CronSyntaxError) as excinfo:
        descriptor_from_fields("CUSTOM", cron_expression="0 25 * * *")
    assert excinfo.value.field == "hour"


def test_to_fields_renders_flat_form():
    weekly = Weekly(time="09:00", day_of_week=1, time_zone="America/New_York")
    assert weekly.to_fields() == {
        "frequency": "WEEKLY",
        "time": "09:00",
        "day_of_week": 1,
        "day_of_month": None,
        "cron_expression": None,
        "time_zone": "America/New_York",
    }
    assert Custom(cron_expression="0 2 * * *").to_fields()["time"] is None


def test_to_fields_round_trips_through_from_fields():
    original = Quarterly(time="10:15", day_of_month=15, time_zone="Asia/Tokyo")
    assert descriptor_from_fields(**original.to_fields()) == original


def test_descriptors_are_hashable_and_frozen():
    daily = Daily(time="07:30")
    assert hash(daily) == hash(Daily(time=TimeOfDay(7, 30)))
    with pytest.raises(AttributeError):
        daily.time_zone = "Europe/Paris"
