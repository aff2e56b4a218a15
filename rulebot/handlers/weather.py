"""
Weather handler — one-line forecasts from a wttr.in compatible service.

    Weather("today", "Paris")    -> "Today in Paris: Sunny, 12°C to 19°C."
    Weather("tomorrow", "Paris") -> "Tomorrow in Paris: ..."

Network failures never escape: the handler logs them and answers with
an apology line instead.
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

DAY_OFFSETS = {"today": 0, "tomorrow": 1}
UNAVAILABLE = "Sorry, I couldn't get the weather right now."
NO_CITY = "Which city do you want the weather for?"


def _build_retry_session() -> requests.Session:
    """A requests Session with conservative GET retries."""
    session = requests.Session()

    retry = Retry(
        total=2,
        connect=2,
        read=2,
        status=2,
        backoff_factor=0.3,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session


class WeatherHandler:
    """Callable handler `(arg, city) -> str`."""

    def __init__(
        self,
        base_url: str = "https://wttr.in",
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = _build_retry_session()
        return self._session

    def __call__(self, arg: str, city: str) -> str:
        city = city.strip()
        if not city:
            return NO_CITY

        day = (arg or "today").strip().lower()
        offset = DAY_OFFSETS.get(day, 0)

        try:
            forecast = self._fetch(city)
            return self._format(day, city, forecast, offset)
        except requests.RequestException as e:
            logger.warning("Weather lookup for %s failed: %s", city, e)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Unexpected weather payload for %s: %s", city, e)
        return UNAVAILABLE

    def _fetch(self, city: str) -> dict:
        url = f"{self.base_url}/{quote(city)}"
        resp = self.session.get(url, params={"format": "j1"}, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def _format(self, day: str, city: str, forecast: dict, offset: int) -> str:
        entry = forecast["weather"][offset]
        hourly = entry.get("hourly") or []
        # Midday sample when the service provides the usual 3-hour slots
        sample = hourly[len(hourly) // 2] if hourly else {}
        descriptions = sample.get("weatherDesc") or [{"value": "No description"}]
        description = descriptions[0]["value"].strip()
        label = day.capitalize() if day in DAY_OFFSETS else "Today"
        return (
            f"{label} in {city}: {description}, "
            f"{entry['mintempC']}°C to {entry['maxtempC']}°C."
        )
