"""USD/TRY döviz kuru servisi - açık API'ler, 5 dakikalık önbellek, sabit yedek kur."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Optional

import urllib3

from kumas_stok.utils import round_to

logger = logging.getLogger(__name__)

RATE_APIS = [
    "https://api.exchangerate-api.com/v4/latest/USD",
    "https://api.frankfurter.app/latest?from=USD&to=TRY",
    "https://api.currencyapi.com/v3/latest?apikey=free&currencies=TRY&base_currency=USD",
]

CACHE_TIMEOUT_SECONDS = 5 * 60


def parse_rate(data: Any) -> float:
    """Farklı API yanıt biçimlerinden TRY kurunu çıkarır; bulunamazsa 0."""
    if not isinstance(data, dict):
        return 0.0
    rates = data.get("rates") or {}
    if rates.get("TRY"):
        return float(rates["TRY"])
    if rates.get("try"):
        return float(rates["try"])
    currency = (data.get("data") or {}).get("TRY") or {}
    if currency.get("value"):
        return float(currency["value"])
    return 0.0


class ExchangeRateService:
    """USD -> TRY kuru sağlar."""

    def __init__(
        self,
        fallback_rate: float = 30.50,
        http: Optional[Any] = None,
        apis: Optional[list[str]] = None,
        clock: Callable[[], float] = time.monotonic,
        timeout: float = 5.0,
    ):
        self.fallback_rate = fallback_rate
        # dependency injection destekli
        self.http = http or urllib3.PoolManager(
            timeout=urllib3.Timeout(total=timeout), retries=False
        )
        self.apis = apis if apis is not None else list(RATE_APIS)
        self._clock = clock
        self._cache: Optional[tuple[float, float]] = None

    def get_usd_to_try(self) -> float:
        now = self._clock()
        if self._cache and now - self._cache[0] < CACHE_TIMEOUT_SECONDS:
            return self._cache[1]

        for url in self.apis:
            try:
                response = self.http.request("GET", url)
                if response.status != 200:
                    logger.warning("Döviz kuru API yanıtı %s (%s)", response.status, url)
                    continue
                rate = parse_rate(json.loads(response.data.decode("utf-8")))
            except (urllib3.exceptions.HTTPError, ValueError, TypeError) as e:
                logger.warning("Döviz kuru API hatası (%s): %s", url, e)
                continue
            if rate > 0:
                self._cache = (now, rate)
                logger.info("USD/TL kuru güncellendi: %.4f", rate)
                return rate

        logger.warning("Döviz kuru API'leri başarısız, varsayılan kur kullanılıyor: %s", self.fallback_rate)
        self._cache = (now, self.fallback_rate)
        return self.fallback_rate

    def convert_usd_to_try(self, usd_amount: float) -> float:
        return round_to(usd_amount * self.get_usd_to_try())

    def convert_try_to_usd(self, try_amount: float) -> float:
        return round_to(try_amount / self.get_usd_to_try())

    def clear_cache(self) -> None:
        self._cache = None
