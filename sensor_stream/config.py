from dataclasses import dataclass, field
from typing import Optional, Tuple

from starlette.config import Config
from starlette.datastructures import CommaSeparatedStrings


@dataclass(frozen=True)
class Settings:
    """Server settings, read from the environment by ``from_config``.

    ``tick_interval`` of 0 disables the periodic generator, which tests use
    to drive ticks by hand. ``sse_ping_interval`` of 0 disables keep-alive
    comments.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    tick_interval: float = 1.0
    packet_loss: float = 0.02
    sse_retry_ms: int = 3000
    sse_ping_interval: float = 15.0
    client_buffer_size: int = 64
    cors_origins: Tuple[str, ...] = field(default=("*",))

    def __post_init__(self) -> None:
        if self.tick_interval < 0:
            raise ValueError("tick_interval must not be negative")
        if not 0.0 <= self.packet_loss <= 1.0:
            raise ValueError("packet_loss must be between 0 and 1")
        if self.sse_retry_ms < 0:
            raise ValueError("sse_retry_ms must not be negative")
        if self.client_buffer_size < 1:
            raise ValueError("client_buffer_size must be at least 1")

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "Settings":
        config = config or Config()
        return cls(
            host=config("HOST", default=cls.host),
            port=config("PORT", cast=int, default=cls.port),
            log_level=config("LOG_LEVEL", default=cls.log_level).lower(),
            tick_interval=config(
                "TICK_INTERVAL", cast=float, default=cls.tick_interval
            ),
            packet_loss=config("PACKET_LOSS", cast=float, default=cls.packet_loss),
            sse_retry_ms=config("SSE_RETRY_MS", cast=int, default=cls.sse_retry_ms),
            sse_ping_interval=config(
                "SSE_PING_INTERVAL", cast=float, default=cls.sse_ping_interval
            ),
            client_buffer_size=config(
                "CLIENT_BUFFER_SIZE", cast=int, default=cls.client_buffer_size
            ),
            cors_origins=tuple(
                config("CORS_ORIGINS", cast=CommaSeparatedStrings, default="*")
            ),
        )
