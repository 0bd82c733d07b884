from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.entities import MarketQuote, TrendingList, WeatherForecast, WeatherReport, utc_now_iso


class MarketResponse(BaseModel):
    success: bool = True
    data: MarketQuote
    timestamp: str = Field(default_factory=utc_now_iso)


class TrendingResponse(BaseModel):
    success: bool = True
    data: TrendingList
    timestamp: str = Field(default_factory=utc_now_iso)


class WeatherResponse(BaseModel):
    success: bool = True
    data: WeatherReport
    timestamp: str = Field(default_factory=utc_now_iso)


class ForecastResponse(BaseModel):
    success: bool = True
    data: WeatherForecast
    timestamp: str = Field(default_factory=utc_now_iso)
