"""Unit tests for NonWorkingDayResolver: day/range/month queries and caching."""

import asyncio

import pytest
from services.attendance_service.calendar.fallbacks import get_fallback_holidays
from services.attendance_service.exceptions import InvalidDateError, InvalidRangeError
from services.attendance_service.schemas import CustomHolidayEntry
from tests.fakes import (
    FakeClock,
    FakeCustomHolidayStore,
    FakeHolidaySource,
    build_resolver,
    holiday,
)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_holi_is_non_working_when_upstream_is_down():
    """With the API failing, the static dataset still knows about Holi 2025."""
    source = FakeHolidaySource(fail=True)
    resolver = build_resolver(source=source, fallback=get_fallback_holidays)

    info = await resolver.get_day_info("2025-03-14")

    assert info.is_non_working is True
    assert info.is_sunday is False
    assert info.public_holiday.local_name == "Holi"
    assert info.reasons == ["Holi"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_plain_weekday_is_working(resolver):
    info = await resolver.get_day_info("2025-03-13")

    assert info.is_non_working is False
    assert info.reasons == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reasons_are_ordered_sunday_public_custom():
    source = FakeHolidaySource([holiday("2026-03-01", "Founders Day")])
    custom = FakeCustomHolidayStore(
        [CustomHolidayEntry(date="2026-03-01", title="Annual Day")]
    )
    resolver = build_resolver(source=source, custom=custom)

    info = await resolver.get_day_info("2026-03-01")

    assert info.is_sunday is True
    assert info.reasons == ["Sunday", "Founders Day", "Annual Day"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_untitled_custom_holiday_reads_as_institute_holiday():
    custom = FakeCustomHolidayStore([CustomHolidayEntry(date="2026-03-04", title="")])
    resolver = build_resolver(custom=custom)

    info = await resolver.get_day_info("2026-03-04")

    assert info.reasons == ["Institute holiday"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_every_sunday_is_non_working(resolver):
    for day in ("2026-01-04", "2026-02-01", "2026-05-31", "2026-12-27"):
        info = await resolver.get_day_info(day)
        assert info.is_sunday and info.is_non_working


@pytest.mark.asyncio
@pytest.mark.unit
async def test_range_only_contains_dates_inside_bounds():
    source = FakeHolidaySource(
        [holiday("2026-01-26", "Republic Day"), holiday("2026-03-20", "Spring Fest")]
    )
    resolver = build_resolver(source=source)

    info = await resolver.get_range_info("2026-01-20", "2026-03-10")

    assert info.start == "2026-01-20"
    assert info.end == "2026-03-10"
    assert all("2026-01-20" <= d <= "2026-03-10" for d in info.dates)
    assert "2026-01-26" in info.dates
    assert "2026-03-20" not in info.dates
    assert "2026-01-18" not in info.dates
    assert info.details["2026-01-26"].public_holiday.local_name == "Republic Day"
    assert info.details["2026-01-25"].is_sunday is True
    assert list(info.details) == sorted(info.details)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_range_with_start_after_end_is_rejected(resolver):
    with pytest.raises(InvalidRangeError):
        await resolver.get_range_info("2026-03-10", "2026-03-01")


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "start, end",
    [("1900-01-01", "2100-12-31"), ("2026-01-01", "2101-01-01")],
)
async def test_range_outside_supported_years_is_rejected(resolver, holiday_source, start, end):
    with pytest.raises(InvalidDateError):
        await resolver.get_range_info(start, end)
    assert holiday_source.calls == []


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("day", ["1999-12-31", "2101-01-01"])
async def test_day_outside_supported_years_is_rejected(resolver, holiday_source, day):
    with pytest.raises(InvalidDateError):
        await resolver.get_day_info(day)
    assert holiday_source.calls == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_single_day_range(resolver):
    info = await resolver.get_range_info("2026-03-01", "2026-03-01")
    assert info.dates == {"2026-03-01"}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_repeated_queries_hit_the_cache():
    source = FakeHolidaySource([holiday("2026-01-26", "Republic Day")])
    custom = FakeCustomHolidayStore()
    resolver = build_resolver(source=source, custom=custom)

    first = await resolver.get_day_info("2026-01-26")
    second = await resolver.get_day_info("2026-01-26")
    await resolver.get_day_info("2026-01-27")

    assert first == second
    assert source.calls == [(2026, "IN")]
    assert custom.calls == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_concurrent_misses_build_the_month_once():
    source = FakeHolidaySource([holiday("2026-01-26", "Republic Day")])
    custom = FakeCustomHolidayStore()
    resolver = build_resolver(source=source, custom=custom)

    results = await asyncio.gather(
        *(resolver.get_day_info("2026-01-26") for _ in range(10))
    )

    assert all(r.is_non_working for r in results)
    assert len(source.calls) == 1
    assert custom.calls == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_month_calendar_rebuilds_after_ttl():
    clock = FakeClock()
    custom = FakeCustomHolidayStore()
    resolver = build_resolver(custom=custom, clock=clock)

    await resolver.get_day_info("2026-02-10")
    clock.advance(hours=3, minutes=59)
    await resolver.get_day_info("2026-02-10")
    assert custom.calls == 1

    clock.advance(minutes=2)
    await resolver.get_day_info("2026-02-10")
    assert custom.calls == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_new_custom_holiday_visible_after_invalidate():
    custom = FakeCustomHolidayStore()
    resolver = build_resolver(custom=custom)

    assert (await resolver.get_day_info("2026-02-10")).is_non_working is False

    await custom.upsert("2026-02-10", "  ", "Board exams")
    # Cached month is still served until invalidated
    assert (await resolver.get_day_info("2026-02-10")).is_non_working is False

    assert resolver.invalidate(2026, 2) == 1
    info = await resolver.get_day_info("2026-02-10")
    assert info.is_non_working is True
    assert info.custom_holiday.title == "Holiday"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_custom_holiday_store_failure_is_not_cached(caplog):
    custom = FakeCustomHolidayStore([CustomHolidayEntry(date="2026-02-10", title="Exam")])
    custom.fail = True
    resolver = build_resolver(custom=custom)

    with caplog.at_level("WARNING"):
        degraded = await resolver.get_day_info("2026-02-10")
    assert degraded.is_non_working is False
    assert "Custom holidays unavailable" in caplog.text

    custom.fail = False
    recovered = await resolver.get_day_info("2026-02-10")
    assert recovered.is_non_working is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_month_calendar_view():
    source = FakeHolidaySource([holiday("2026-01-26", "Republic Day")])
    custom = FakeCustomHolidayStore([CustomHolidayEntry(date="2026-01-02", title="Winter Break")])
    resolver = build_resolver(source=source, custom=custom)

    view = await resolver.get_month_calendar(2026, 1)

    assert view.country_code == "IN"
    assert view.sundays == ["2026-01-04", "2026-01-11", "2026-01-18", "2026-01-25"]
    assert [h.date for h in view.public_holidays] == ["2026-01-26"]
    assert [c.title for c in view.custom_holidays] == ["Winter Break"]
    assert view.non_working_dates == sorted(
        ["2026-01-02", "2026-01-04", "2026-01-11", "2026-01-18", "2026-01-25", "2026-01-26"]
    )


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("year,month", [(1999, 5), (2101, 1), (2026, 0), (2026, 13)])
async def test_month_calendar_rejects_out_of_range(resolver, year, month):
    with pytest.raises(InvalidDateError):
        await resolver.get_month_calendar(year, month)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_invalid_date_input_is_rejected(resolver):
    with pytest.raises(InvalidDateError):
        await resolver.get_day_info("14/03/2025")
