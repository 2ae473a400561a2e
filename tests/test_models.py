import json
import unittest

from weather_view.errors import DataUnavailableError
from weather_view.models import decode_forecast

from tests.fakes import T0, forecast_timestamps, make_item, make_payload


class TestDecodeForecast(unittest.TestCase):
    def test_decodes_city_and_samples(self):
        city, samples = decode_forecast(make_payload(forecast_timestamps(3)))

        self.assertEqual(city.name, "Istanbul")
        self.assertEqual(city.country_code, "TR")
        self.assertEqual(city.timezone_offset, 10800)
        self.assertEqual(city.latitude, 41.01)
        self.assertEqual(len(samples), 3)

        first = samples[0]
        self.assertEqual(first.timestamp_utc, T0)
        self.assertEqual(first.temperature, 10.0)
        self.assertEqual(first.pressure, 1012.0)
        self.assertEqual(first.sea_level_pressure, 1013.0)
        self.assertEqual(first.ground_level_pressure, 1001.0)
        self.assertEqual(first.humidity, 64)
        self.assertEqual(first.wind_direction, 250)
        self.assertEqual(first.weather_code, "500")
        self.assertEqual(first.description, "light rain")
        self.assertEqual(first.icon_key, "10d")

    def test_accepts_text_body(self):
        _city, samples = decode_forecast(make_payload([T0]).decode("utf-8"))
        self.assertEqual(len(samples), 1)

    def test_empty_condition_list_is_kept(self):
        body = {"city": {"name": "X", "country": "YY"}, "list": [make_item(T0, weather=[])]}
        _city, samples = decode_forecast(json.dumps(body))
        self.assertIsNone(samples[0].description)
        self.assertIsNone(samples[0].icon_key)

    def test_entries_without_main_are_skipped(self):
        item = make_item(T0 + 10800)
        del item["main"]
        body = {"city": {"name": "X"}, "list": [make_item(T0), item]}
        _city, samples = decode_forecast(json.dumps(body))
        self.assertEqual([s.timestamp_utc for s in samples], [T0])

    def test_malformed_json(self):
        with self.assertRaises(DataUnavailableError):
            decode_forecast(b"{not json")

    def test_missing_city_or_list(self):
        with self.assertRaises(DataUnavailableError) as ctx:
            decode_forecast(json.dumps({"list": [make_item(T0)]}))
        self.assertEqual(ctx.exception.details["missing"], ["city"])

        with self.assertRaises(DataUnavailableError) as ctx:
            decode_forecast(json.dumps({"city": {"name": "X"}}))
        self.assertEqual(ctx.exception.details["missing"], ["list"])

    def test_wrong_types(self):
        with self.assertRaises(DataUnavailableError):
            decode_forecast(json.dumps({"city": {"name": "X"}, "list": [{"dt": "soon"}]}))

    def test_no_usable_samples(self):
        with self.assertRaises(DataUnavailableError):
            decode_forecast(json.dumps({"city": {"name": "X"}, "list": []}))

    def test_timestamp_beyond_calendar_range(self):
        with self.assertRaises(DataUnavailableError):
            decode_forecast(make_payload([10**14]))

    def test_timezone_offset_must_be_under_a_day(self):
        city = {"name": "X", "country": "XX", "timezone": 90000}
        with self.assertRaises(DataUnavailableError):
            decode_forecast(make_payload([T0], city=city))

    def test_missing_sun_times_stay_unset(self):
        city, _samples = decode_forecast(make_payload([T0], city={"name": "X", "country": "XX"}))
        self.assertIsNone(city.sunrise)
        self.assertIsNone(city.sunset)
        self.assertEqual(city.timezone_offset, 0)


if __name__ == "__main__":
    unittest.main()
