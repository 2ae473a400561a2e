import unittest

import requests

from weather_view.data_sources import openweather_client
from weather_view.errors import DataUnavailableError, OfflineError

from tests.fakes import T0, make_payload


class DummyResp:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class RecordingSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


class TestOpenWeatherClient(unittest.TestCase):
    def setUp(self):
        self._orig_session = openweather_client.session

    def tearDown(self):
        openweather_client.session = self._orig_session

    def test_fetch_forecast_returns_raw_body(self):
        body = make_payload([T0])
        session = RecordingSession(response=DummyResp(body))
        openweather_client.session = session

        raw = openweather_client.fetch_forecast(
            41.0, 29.0, api_key="k", base_url="https://example.test/data/2.5/", timeout=3
        )

        self.assertEqual(raw, body)
        call = session.calls[0]
        self.assertEqual(call["url"], "https://example.test/data/2.5/forecast")
        self.assertEqual(call["params"], {"lat": 41.0, "lon": 29.0, "units": "metric", "appid": "k"})
        self.assertEqual(call["timeout"], 3)

    def test_connection_error_is_offline(self):
        openweather_client.session = RecordingSession(exc=requests.ConnectionError("no route"))
        with self.assertRaises(OfflineError):
            openweather_client.fetch_forecast(0, 0, api_key="k")

    def test_timeout_is_offline(self):
        openweather_client.session = RecordingSession(exc=requests.Timeout("slow"))
        with self.assertRaises(OfflineError):
            openweather_client.fetch_forecast(0, 0, api_key="k")

    def test_error_status_is_data_unavailable(self):
        openweather_client.session = RecordingSession(response=DummyResp(b'{"cod":401}', status_code=401))
        with self.assertRaises(DataUnavailableError):
            openweather_client.fetch_forecast(0, 0, api_key="bad")

    def test_broken_transfer_is_data_unavailable(self):
        openweather_client.session = RecordingSession(exc=requests.exceptions.ChunkedEncodingError("cut"))
        with self.assertRaises(DataUnavailableError):
            openweather_client.fetch_forecast(0, 0, api_key="k")

    def test_invalid_base_url_is_data_unavailable(self):
        openweather_client.session = RecordingSession(exc=requests.exceptions.MissingSchema("no scheme"))
        with self.assertRaises(DataUnavailableError):
            openweather_client.fetch_forecast(0, 0, api_key="k", base_url="api.example.test")


if __name__ == "__main__":
    unittest.main()
