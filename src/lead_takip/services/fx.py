# src/lead_takip/services/fx.py
"""USD/TRY rate from the Turkish central bank (TCMB) daily XML."""
from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import httpx
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

TCMB_TODAY_URL = "https://www.tcmb.gov.tr/kurlar/today.xml"
CACHE_MINUTES = int(os.getenv("FX_CACHE_MINUTES", "30"))
FALLBACK_BUYING = 34.50
FALLBACK_SELLING = 34.70


@dataclass(frozen=True)
class ExchangeRate:
    buying: float
    selling: float
    fetched_at: datetime
    source: str = "tcmb"     # 'tcmb' | 'stale' | 'fallback'


def archive_url(day: date) -> str:
    """TCMB archive file, e.g. .../kurlar/2501/06012025.xml"""
    return f"https://www.tcmb.gov.tr/kurlar/{day:%Y%m}/{day:%d%m%Y}.xml"


def parse_tcmb_xml(xml_text: str) -> tuple[float, float]:
    """(ForexBuying, ForexSelling) of USD; ValueError when absent."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValueError(f"invalid TCMB XML: {e}") from e
    for cur in root.iter("Currency"):
        code = cur.get("Kod") or cur.get("CurrencyCode")
        if code != "USD":
            continue
        buying = (cur.findtext("ForexBuying") or "").strip()
        selling = (cur.findtext("ForexSelling") or "").strip()
        if buying and selling:
            return float(buying), float(selling)
    raise ValueError("USD rate not found in TCMB XML")


class ExchangeRateService:
    """Caches the rate for ``cache_minutes``; never raises to the caller."""

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        cache_minutes: int = CACHE_MINUTES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client or httpx.Client(timeout=10.0, follow_redirects=True)
        self.cache_ttl = timedelta(minutes=cache_minutes)
        self.clock = clock
        self._cache: Optional[ExchangeRate] = None

    def _cache_fresh(self) -> bool:
        return self._cache is not None and self.clock() - self._cache.fetched_at < self.cache_ttl

    def _fetch(self) -> ExchangeRate:
        today = self.clock().date()
        urls = [TCMB_TODAY_URL, archive_url(today - timedelta(days=1))]
        last_error: Optional[Exception] = None
        for url in urls:
            try:
                resp = self.client.get(url)
                resp.raise_for_status()
                buying, selling = parse_tcmb_xml(resp.text)
                return ExchangeRate(buying, selling, self.clock())
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("TCMB fetch failed for %s: %s", url, e)
                last_error = e
        raise RuntimeError(f"TCMB not reachable: {last_error}")

    def usd_try(self) -> ExchangeRate:
        if self._cache_fresh():
            return self._cache
        try:
            self._cache = self._fetch()
            return self._cache
        except RuntimeError as e:
            logger.error("%s", e)
            if self._cache is not None:
                return ExchangeRate(self._cache.buying, self._cache.selling, self._cache.fetched_at, "stale")
            return ExchangeRate(FALLBACK_BUYING, FALLBACK_SELLING, self.clock(), "fallback")

    def current_rate(self) -> float:
        return self.usd_try().selling

    def convert_try_to_usd(self, amount: float) -> float:
        return amount / self.usd_try().selling
