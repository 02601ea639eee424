"""Temperature oracle: contract, OpenWeather adapter, and fallback policy.

The oracle is the trusted, independent source of temperature for a
location.  Any implementation of ``TemperatureOracle`` either returns a
``TemperatureReading`` or raises ``OracleUnavailableError``; nothing else.

``verified_reading()`` is the single place where a failed lookup turns into
a deterministic estimate, so ``add_event`` always completes.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from coldchain.core.errors import OracleUnavailableError
from coldchain.models.oracle import ReadingSource, TemperatureReading

logger = logging.getLogger(__name__)

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

# Typical ambient temperatures (degrees C) used when the oracle is unreachable.
BASE_TEMPERATURES: dict[str, float] = {
    "Mumbai": 32.0,
    "Delhi": 28.0,
    "Bangalore": 24.0,
    "Chennai": 30.0,
    "Kolkata": 29.0,
    "Hyderabad": 26.0,
    "Pune": 25.0,
    "Ahmedabad": 31.0,
    "Jaipur": 27.0,
    "Lucknow": 23.0,
    "Surat": 33.0,
    "Kanpur": 26.0,
    "Nagpur": 29.0,
    "Indore": 27.0,
    "Thane": 31.0,
}
DEFAULT_ESTIMATE = 25.0


@runtime_checkable
class TemperatureOracle(Protocol):
    """Contract: ``location -> TemperatureReading`` or OracleUnavailableError."""

    def get_temperature(self, location: str) -> TemperatureReading: ...


def fallback_estimate(location: str) -> TemperatureReading:
    """Deterministic location-keyed estimate used when the oracle fails.

    Lookup is case-insensitive on the city name; unknown places get
    ``DEFAULT_ESTIMATE``.
    """
    key = location.strip().lower()
    temperature = next(
        (temp for city, temp in BASE_TEMPERATURES.items() if city.lower() == key),
        DEFAULT_ESTIMATE,
    )
    return TemperatureReading(
        location=location,
        temperature=temperature,
        conditions="Estimated",
        source=ReadingSource.ESTIMATE,
    )


def verified_reading(oracle: TemperatureOracle, location: str) -> TemperatureReading:
    """Ask *oracle* for *location*, degrading to ``fallback_estimate``.

    A reading without a finite temperature counts as a failed lookup.
    """
    try:
        reading = oracle.get_temperature(location)
        if not math.isfinite(reading.temperature):
            raise OracleUnavailableError(f"Non-finite temperature for {location!r}")
        return reading
    except OracleUnavailableError as exc:
        logger.warning(
            "Oracle unavailable for %r (%s); using fallback estimate.", location, exc
        )
        return fallback_estimate(location)


class OpenWeatherOracle:
    """OpenWeather current-weather adapter.

    Parameters
    ----------
    api_key:
        OpenWeather ``appid``.  An empty key makes every lookup fail fast
        with OracleUnavailableError.
    country_code:
        Appended to the city query (``q=<location>,<country_code>``).
    timeout_seconds:
        httpx timeout applied to each phase of a request (connect, read,
        write, pool), also when *client* is injected.  Any timeout is a
        failure.
    client:
        Optional pre-built ``httpx.Client`` (tests inject a MockTransport).
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = OPENWEATHER_URL,
        country_code: str = "IN",
        timeout_seconds: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._country_code = country_code
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client = client or httpx.Client(timeout=timeout_seconds)
        self._owns_client = client is None

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> OpenWeatherOracle:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def get_temperature(self, location: str) -> TemperatureReading:
        if not self._api_key:
            raise OracleUnavailableError("OpenWeather API key not configured")

        query = f"{location},{self._country_code}" if self._country_code else location
        params = {"q": query, "appid": self._api_key, "units": "metric"}
        try:
            response = self._client.get(self._base_url, params=params, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise OracleUnavailableError(
                f"Weather API returned {exc.response.status_code} for {location!r}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OracleUnavailableError(f"Weather API request failed: {exc}") from exc
        except ValueError as exc:
            raise OracleUnavailableError("Weather API returned invalid JSON") from exc

        return self._parse(location, data)

    @staticmethod
    def _parse(location: str, data: Any) -> TemperatureReading:
        main = data.get("main") if isinstance(data, Mapping) else None
        temp = main.get("temp") if isinstance(main, Mapping) else None
        if isinstance(temp, bool) or not isinstance(temp, (int, float)):
            raise OracleUnavailableError("Temperature data not found in response")

        weather = data.get("weather")
        first = weather[0] if isinstance(weather, list) and weather else None
        conditions = first.get("description", "") if isinstance(first, Mapping) else ""
        try:
            value = float(temp)
            if not math.isfinite(value):
                raise OracleUnavailableError(f"Non-finite temperature {temp!r} for {location!r}")
            return TemperatureReading(
                location=data.get("name") or location,
                temperature=round(value, 1),
                humidity=main.get("humidity"),
                conditions=conditions,
                source=ReadingSource.ORACLE,
            )
        except (ValidationError, OverflowError) as exc:
            raise OracleUnavailableError(f"Malformed weather payload for {location!r}") from exc


class FixedReadingOracle:
    """Serves preset temperatures per location (offline demos, fixtures).

    Locations missing from *readings* raise OracleUnavailableError, which
    exercises the fallback path exactly like a network failure would.
    """

    def __init__(self, readings: Mapping[str, float] | None = None) -> None:
        self._readings: dict[str, float] = dict(readings or {})
        self.calls: list[str] = []

    def set_reading(self, location: str, temperature: float) -> None:
        self._readings[location] = temperature

    def get_temperature(self, location: str) -> TemperatureReading:
        self.calls.append(location)
        if location not in self._readings:
            raise OracleUnavailableError(f"No reading for {location!r}")
        return TemperatureReading(
            location=location,
            temperature=round(self._readings[location], 1),
            source=ReadingSource.ORACLE,
        )
