from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_market_data_client, get_weather_client
from app.infrastructure.clients.market_data import MarketDataClient
from app.infrastructure.clients.weather import WeatherClient
from app.schemas.feeds import ForecastResponse, MarketResponse, TrendingResponse, WeatherResponse

router = APIRouter(prefix="/api", tags=["feeds"])


@router.get("/fetch-market/{symbol}", response_model=MarketResponse)
async def fetch_market(symbol: str, client: MarketDataClient = Depends(get_market_data_client)) -> MarketResponse:
    return MarketResponse(data=await client.get_price(symbol.strip()))


@router.get("/fetch-trending", response_model=TrendingResponse)
async def fetch_trending(client: MarketDataClient = Depends(get_market_data_client)) -> TrendingResponse:
    return TrendingResponse(data=await client.get_trending())


@router.get("/fetch-weather/{city}", response_model=WeatherResponse)
async def fetch_weather(city: str, client: WeatherClient = Depends(get_weather_client)) -> WeatherResponse:
    return WeatherResponse(data=await client.get_weather(city.strip()))


@router.get("/fetch-forecast/{city}", response_model=ForecastResponse)
async def fetch_forecast(city: str, client: WeatherClient = Depends(get_weather_client)) -> ForecastResponse:
    return ForecastResponse(data=await client.get_forecast(city.strip()))
