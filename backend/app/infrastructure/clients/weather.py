from __future__ import annotations

import httpx
from pydantic import ValidationError

from app.domain.entities import WEATHER_SERVICE, ConnectionStatus, ForecastEntry, WeatherForecast, WeatherReport
from app.domain.errors import InvalidResponseError, ProviderAuthError, ProviderHTTPError, ServiceError
from app.infrastructure.clients.base import BaseClient


FORECAST_HOURS = 8
PROBE_CITY = "London"


class WeatherClient(BaseClient):
    service = WEATHER_SERVICE
    display_name = "WeatherAPI"
    timeout_setting = "weather_timeout_seconds"
    required_settings_fields = ["weather_api_key"]

    def _url(self, path: str) -> str:
        return f"{self.settings.weather_base_url.rstrip('/')}{path}"

    async def get_weather(self, city: str) -> WeatherReport:
        self._ensure_configured()
        response = await self._request(
            "GET",
            self._url("/current.json"),
            params={"key": self.settings.weather_api_key, "q": city, "aqi": "no"},
            subject=city,
        )
        data = self._json(response)
        try:
            current = data["current"]
            return WeatherReport(
                city=data["location"]["name"],
                country=data["location"]["country"],
                temperature=current["temp_c"],
                humidity=current["humidity"],
                pressure=current["pressure_mb"],
                description=current["condition"]["text"],
                main=current["condition"]["text"],
                # kph -> m/s
                wind_speed=current["wind_kph"] / 3.6,
            )
        except (KeyError, TypeError, ValidationError) as exc:
            raise InvalidResponseError(self.service, "WeatherAPI current payload is malformed") from exc

    async def get_forecast(self, city: str) -> WeatherForecast:
        self._ensure_configured()
        response = await self._request(
            "GET",
            self._url("/forecast.json"),
            params={"key": self.settings.weather_api_key, "q": city, "days": 1, "aqi": "no", "alerts": "no"},
            subject=city,
        )
        data = self._json(response)
        try:
            hours = data["forecast"]["forecastday"][0]["hour"][:FORECAST_HOURS]
            return WeatherForecast(
                city=data["location"]["name"],
                country=data["location"]["country"],
                forecast=[
                    ForecastEntry(
                        datetime=item["time"],
                        temperature=item["temp_c"],
                        humidity=item["humidity"],
                        pressure=item["pressure_mb"],
                        description=item["condition"]["text"],
                    )
                    for item in hours
                ],
            )
        except (KeyError, IndexError, TypeError, ValidationError) as exc:
            raise InvalidResponseError(self.service, "WeatherAPI forecast payload is malformed") from exc

    def _map_status_error(self, response: httpx.Response, subject: str | None = None) -> ServiceError:
        status = response.status_code
        if status in {401, 403}:
            return ProviderAuthError(self.service, "WeatherAPI key invalid or expired", status_code=status)
        if status == 400 and subject:
            return ProviderHTTPError(self.service, f"City '{subject}' not found", status_code=400)
        return super()._map_status_error(response, subject=subject)

    async def _probe(self) -> ConnectionStatus:
        response = await self._request(
            "GET",
            self._url("/current.json"),
            params={"key": self.settings.weather_api_key, "q": PROBE_CITY, "aqi": "no"},
        )
        data = self._json(response)
        location = data.get("location") if isinstance(data, dict) else None
        if isinstance(location, dict) and location.get("name"):
            return ConnectionStatus.connected(self.service)
        return ConnectionStatus.failed(self.service, "Unexpected response from WeatherAPI", "INVALID_RESPONSE")
