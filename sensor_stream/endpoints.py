from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse

from sensor_stream.broadcaster import Broadcaster
from sensor_stream.dashboard import html_dashboard
from sensor_stream.models import Target
from sensor_stream.stats import StatsAggregator


async def home(request: Request) -> HTMLResponse:
    return HTMLResponse(html_dashboard)


async def stats(request: Request) -> JSONResponse:
    aggregator: StatsAggregator = request.app.state.stats
    return JSONResponse(aggregator.snapshot())


async def broadcast(request: Request) -> JSONResponse:
    """Send ``{message, protocol}`` to every client of the chosen transport(s)."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "body must be JSON"}, status_code=400)
    if not isinstance(body, dict):
        return JSONResponse({"error": "body must be a JSON object"}, status_code=400)

    message = body.get("message")
    if not isinstance(message, str):
        return JSONResponse({"error": "message must be a string"}, status_code=400)
    try:
        target = Target(body.get("protocol") or Target.ALL.value)
    except ValueError:
        choices = ", ".join(t.value for t in Target)
        return JSONResponse(
            {"error": f"protocol must be one of: {choices}"}, status_code=400
        )

    broadcaster: Broadcaster = request.app.state.broadcaster
    broadcaster.broadcast(message, target)
    return JSONResponse({"status": "Message broadcasted", "protocol": target.value})
