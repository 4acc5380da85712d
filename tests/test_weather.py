import httpx
import pytest

from lokalaku.services.weather import WeatherGateway
from lokalaku.models.domain import Coordinate

CENTER = Coordinate(latitude=-6.2, longitude=106.816666)

OWM_BODY = {
    "weather": [{"id": 500, "main": "Rain", "description": "hujan ringan", "icon": "10d"}],
    "main": {"temp": 28.6, "feels_like": 33.4, "temp_min": 27.1, "temp_max": 29.0, "humidity": 79},
    "wind": {"speed": 3.1, "deg": 240},
    "name": "Jakarta",
}


def gateway_for(handler, **kwargs) -> WeatherGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("api_key", "test-key")
    return WeatherGateway(base_url="https://weather.test/data/2.5", lang="id", client=client, **kwargs)


@pytest.mark.asyncio
async def test_parses_current_conditions():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=OWM_BODY)

    snapshot = await gateway_for(handler).get_current_weather(CENTER)

    assert snapshot.temperature_c == 29
    assert snapshot.feels_like_c == 33
    assert snapshot.description == "hujan ringan"
    assert snapshot.condition == "Rain"
    assert snapshot.humidity_pct == 79
    assert snapshot.wind_speed_ms == pytest.approx(3.1)

    (request,) = seen
    assert request.url.path == "/data/2.5/weather"
    assert request.url.params["units"] == "metric"
    assert request.url.params["lang"] == "id"
    assert request.url.params["appid"] == "test-key"
    assert float(request.url.params["lat"]) == CENTER.latitude


@pytest.mark.asyncio
async def test_server_error_means_unknown_weather():
    gateway = gateway_for(lambda request: httpx.Response(500, text="oops"))

    assert await gateway.get_current_weather(CENTER) is None


@pytest.mark.asyncio
async def test_timeout_means_unknown_weather():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    assert await gateway_for(handler).get_current_weather(CENTER) is None


@pytest.mark.asyncio
async def test_connection_error_means_unknown_weather():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    assert await gateway_for(handler).get_current_weather(CENTER) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json={"main": {"temp": 30}}),
        httpx.Response(200, json={"weather": [], "main": {"temp": 30, "feels_like": 31, "humidity": 50}}),
        httpx.Response(200, json=[1, 2, 3]),
    ],
)
async def test_malformed_body_means_unknown_weather(response):
    assert await gateway_for(lambda request: response).get_current_weather(CENTER) is None


@pytest.mark.asyncio
async def test_missing_api_key_skips_the_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=OWM_BODY)

    gateway = gateway_for(handler, api_key="")

    assert await gateway.get_current_weather(CENTER) is None
    assert seen == []
