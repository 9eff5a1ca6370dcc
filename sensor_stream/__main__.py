import logging

import uvicorn

from sensor_stream.app import create_app
from sensor_stream.config import Settings

log_fmt = r"%(asctime)-15s %(levelname)s %(name)s %(funcName)s:%(lineno)d %(message)s"
datefmt = "%Y-%m-%d %H:%M:%S"


def main() -> None:
    settings = Settings.from_config()
    logging.basicConfig(
        format=log_fmt, level=settings.log_level.upper(), datefmt=datefmt
    )
    _log = logging.getLogger("sensor_stream")

    app = create_app(settings)
    _log.info("Dashboard:     http://localhost:%d", settings.port)
    _log.info("SSE endpoint:  http://localhost:%d/sse", settings.port)
    _log.info("WebSocket:     ws://localhost:%d", settings.port)
    _log.info("Stats API:     http://localhost:%d/api/stats", settings.port)
    uvicorn.run(
        app, host=settings.host, port=settings.port, log_level=settings.log_level
    )


if __name__ == "__main__":
    main()
