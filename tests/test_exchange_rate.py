"""Döviz kuru servisi unit testleri."""

import json
from unittest.mock import MagicMock

import urllib3

from kumas_stok.services.exchange_rate import CACHE_TIMEOUT_SECONDS, ExchangeRateService, parse_rate


def _response(payload, status=200):
    response = MagicMock()
    response.status = status
    response.data = json.dumps(payload).encode("utf-8")
    return response


class TestParseRate:

    def test_rates_upper(self):
        assert parse_rate({"rates": {"TRY": 32.1}}) == 32.1

    def test_rates_lower(self):
        assert parse_rate({"rates": {"try": 31.9}}) == 31.9

    def test_currencyapi_format(self):
        assert parse_rate({"data": {"TRY": {"value": 33.4}}}) == 33.4

    def test_unknown_format(self):
        assert parse_rate({"foo": 1}) == 0
        assert parse_rate(None) == 0


class TestExchangeRateService:

    def test_first_successful_api_used(self):
        http = MagicMock()
        http.request.side_effect = [_response({}, status=500), _response({"rates": {"TRY": 32.5}})]
        service = ExchangeRateService(http=http, apis=["a", "b", "c"])

        assert service.get_usd_to_try() == 32.5
        assert http.request.call_count == 2

    def test_fallback_when_all_fail(self):
        http = MagicMock()
        http.request.side_effect = urllib3.exceptions.MaxRetryError(None, "a")
        service = ExchangeRateService(fallback_rate=30.5, http=http, apis=["a"])
        assert service.get_usd_to_try() == 30.5

    def test_invalid_json_skipped(self):
        http = MagicMock()
        bad = MagicMock(status=200, data=b"<html>")
        http.request.side_effect = [bad, _response({"rates": {"TRY": 31}})]
        service = ExchangeRateService(http=http, apis=["a", "b"])
        assert service.get_usd_to_try() == 31

    def test_cached_for_five_minutes(self):
        now = [0.0]
        http = MagicMock()
        http.request.return_value = _response({"rates": {"TRY": 32}})
        service = ExchangeRateService(http=http, apis=["a"], clock=lambda: now[0])

        service.get_usd_to_try()
        now[0] = CACHE_TIMEOUT_SECONDS - 1
        service.get_usd_to_try()
        assert http.request.call_count == 1

        now[0] = CACHE_TIMEOUT_SECONDS
        service.get_usd_to_try()
        assert http.request.call_count == 2

    def test_conversions(self):
        service = ExchangeRateService(fallback_rate=32.0, http=MagicMock(), apis=[])
        assert service.convert_usd_to_try(10) == 320
        assert service.convert_try_to_usd(800) == 25

    def test_clear_cache(self):
        http = MagicMock()
        http.request.return_value = _response({"rates": {"TRY": 32}})
        service = ExchangeRateService(http=http, apis=["a"])
        service.get_usd_to_try()
        service.clear_cache()
        service.get_usd_to_try()
        assert http.request.call_count == 2
