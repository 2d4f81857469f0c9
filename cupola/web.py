# ABOUTME: ASGI web entry point exposing the weather aggregator as GET /api/weather.
# ABOUTME: Builds a Starlette app that maps tagged aggregator results onto JSON responses.

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from cupola.deps import WeatherDeps, create_http_client, load_credentials
from cupola.weather_service import AggregateErr, aggregate_weather

logger = logging.getLogger(__name__)

load_dotenv()


async def weather(request: Request) -> JSONResponse:
    """Proxy the general and ocean Meteomatics calls for ?lat=&lon= and return the merged JSON."""
    deps: WeatherDeps = request.app.state.deps
    try:
        result = await aggregate_weather(
            deps.http_client,
            request.query_params.get("lat"),
            request.query_params.get("lon"),
            credentials=load_credentials(),
        )
    except Exception as e:
        logger.exception("Weather route error")
        return JSONResponse({"error": str(e)}, status_code=500)

    if isinstance(result, AggregateErr):
        return JSONResponse({"error": result.detail}, status_code=result.status_code)
    return JSONResponse(result.document)


def create_app(deps: WeatherDeps | None = None) -> Starlette:
    """Create the ASGI app. Without ``deps`` a fresh httpx client is opened and closed with the app."""
    owns_client = deps is None
    deps = deps or WeatherDeps(http_client=create_http_client())

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        if owns_client:
            await deps.http_client.aclose()

    app = Starlette(routes=[Route("/api/weather", weather, methods=["GET"])], lifespan=lifespan)
    app.state.deps = deps
    return app


app = create_app()
