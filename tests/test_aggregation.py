import datetime as dt
import random
import unittest
from zoneinfo import ZoneInfo

from weather_view.aggregation import (
    bucket_by_local_day,
    build_snapshot,
    select_daily_representatives,
    select_today_hourly,
)
from weather_view.domain import DateKey, WeatherTableItem

from tests.fakes import T0, THREE_HOURS, forecast_timestamps, make_city, make_sample


TOKYO = ZoneInfo("Asia/Tokyo")


class TestBucketByLocalDay(unittest.TestCase):
    def test_empty_input_yields_empty_mapping(self):
        self.assertEqual(bucket_by_local_day([], dt.timezone.utc), {})

    def test_every_sample_lands_in_exactly_one_bucket(self):
        samples = [make_sample(ts) for ts in forecast_timestamps(40)]
        random.Random(7).shuffle(samples)

        buckets = bucket_by_local_day(samples, TOKYO)

        flattened = [s for day in buckets.values() for s in day]
        self.assertEqual(len(flattened), len(samples))
        self.assertEqual(
            sorted(s.timestamp_utc for s in flattened),
            sorted(s.timestamp_utc for s in samples),
        )

    def test_same_local_day_across_utc_midnight(self):
        # 2024-01-01 20:00Z and 2024-01-02 03:00Z are both 2024-01-02 in Tokyo
        late_utc = make_sample(T0 + 20 * 3600)
        early_next_utc = make_sample(T0 + 27 * 3600)

        buckets = bucket_by_local_day([late_utc, early_next_utc], TOKYO)

        self.assertEqual(list(buckets), [DateKey(2024, 1, 2)])
        self.assertEqual(len(buckets[DateKey(2024, 1, 2)]), 2)

    def test_same_utc_day_split_by_local_zone(self):
        # 12:00Z is Jan 1 21:00 in Tokyo, 18:00Z is Jan 2 03:00
        buckets = bucket_by_local_day([make_sample(T0 + 12 * 3600), make_sample(T0 + 18 * 3600)], TOKYO)
        self.assertEqual(set(buckets), {DateKey(2024, 1, 1), DateKey(2024, 1, 2)})

    def test_date_key_midnight(self):
        key = DateKey.from_timestamp(T0 + 20 * 3600, TOKYO)
        self.assertEqual(key.midnight(TOKYO), dt.datetime(2024, 1, 2, tzinfo=TOKYO))
        self.assertEqual(key.isoformat(), "2024-01-02")


class TestSelectTodayHourly(unittest.TestCase):
    def test_returns_earliest_eight_in_order(self):
        timestamps = forecast_timestamps(20)
        samples = [make_sample(ts) for ts in reversed(timestamps)]

        hourly = select_today_hourly(samples, 8)

        self.assertEqual([s.timestamp_utc for s in hourly], timestamps[:8])

    def test_fewer_samples_than_count(self):
        samples = [make_sample(T0 + THREE_HOURS), make_sample(T0)]
        hourly = select_today_hourly(samples, 8)
        self.assertEqual([s.timestamp_utc for s in hourly], [T0, T0 + THREE_HOURS])

    def test_not_filtered_to_current_day(self):
        # 22:00Z + 3h steps cross into the next UTC day
        samples = [make_sample(ts) for ts in forecast_timestamps(4, start=T0 + 22 * 3600)]
        self.assertEqual(len(select_today_hourly(samples, 8)), 4)

    def test_ties_keep_input_order(self):
        first = make_sample(T0, temperature=1.0)
        second = make_sample(T0, temperature=2.0)
        hourly = select_today_hourly([second, first], 2)
        self.assertEqual([s.temperature for s in hourly], [2.0, 1.0])


class TestSelectDailyRepresentatives(unittest.TestCase):
    def test_midpoint_of_five_is_index_two(self):
        day = [make_sample(T0 + i * THREE_HOURS) for i in range(5)]
        reps = select_daily_representatives({DateKey(2024, 1, 1): list(reversed(day))})
        self.assertEqual(reps, [day[2]])

    def test_midpoint_of_four_is_index_two(self):
        day = [make_sample(T0 + i * THREE_HOURS) for i in range(4)]
        reps = select_daily_representatives({DateKey(2024, 1, 1): [day[3], day[0], day[2], day[1]]})
        self.assertEqual(reps, [day[2]])

    def test_empty_bucket_is_skipped(self):
        only = make_sample(T0 + 2 * 86400)
        reps = select_daily_representatives({DateKey(2024, 1, 2): [], DateKey(2024, 1, 3): [only]})
        self.assertEqual(reps, [only])

    def test_days_are_chronological_regardless_of_insertion_order(self):
        buckets = {
            DateKey(2024, 1, 3): [make_sample(T0 + 2 * 86400)],
            DateKey(2023, 12, 31): [make_sample(T0 - 86400)],
            DateKey(2024, 1, 1): [make_sample(T0)],
        }
        reps = select_daily_representatives(buckets)
        keys = [DateKey.from_timestamp(s.timestamp_utc, dt.timezone.utc) for s in reps]
        self.assertEqual(keys, sorted(keys))
        self.assertEqual(len(set(keys)), 3)


class TestBuildSnapshot(unittest.TestCase):
    def test_full_pipeline(self):
        samples = [make_sample(ts) for ts in forecast_timestamps(40)]
        snapshot = build_snapshot(make_city(), samples, timezone=dt.timezone.utc, hourly_count=8, hourly_row_height=88)

        self.assertEqual(len(snapshot.buckets), 5)
        self.assertEqual(len(snapshot.hourly), 8)
        self.assertEqual(len(snapshot.daily), 5)
        self.assertEqual(len(snapshot.day_rows), 5)
        self.assertEqual(snapshot.current.timestamp_utc, T0)
        self.assertEqual(snapshot.hourly_container_height, 8 * 88)
        self.assertEqual(snapshot.table_items[0], WeatherTableItem.CITY_INFO)
        self.assertEqual(snapshot.table_items[0].height, 60)
        self.assertTrue(snapshot.is_current_sample(samples[0]))

    def test_auto_timezone_uses_city_offset(self):
        # 22:00Z is already the next day at UTC+3
        samples = [make_sample(T0 + 22 * 3600)]
        snapshot = build_snapshot(make_city(timezone_offset=3 * 3600), samples)
        self.assertEqual(list(snapshot.buckets), [DateKey(2024, 1, 2)])

    def test_rebuilding_from_same_input_is_identical(self):
        samples = tuple(make_sample(ts) for ts in forecast_timestamps(17))
        city = make_city()
        first = build_snapshot(city, samples, timezone=TOKYO)
        second = build_snapshot(city, samples, timezone=TOKYO)
        self.assertEqual(first, second)

    def test_empty_samples_rejected(self):
        with self.assertRaises(ValueError):
            build_snapshot(make_city(), [])


if __name__ == "__main__":
    unittest.main()
