"""Configuration via environment variables with ORDERBOOK_SIM_ prefix."""

from pydantic_settings import BaseSettings

from .types import Venue


class Settings(BaseSettings):
    model_config = {"env_prefix": "ORDERBOOK_SIM_"}

    # Initial selection
    venue: Venue = Venue.OKX
    symbol: str = "BTC-USD"

    # WebSocket
    ping_interval_sec: float = 20.0
    reconnect_delay_sec: float = 1.0
    reconnect_max_delay_sec: float = 30.0

    # UI
    levels: int = 25
    refresh_interval_ms: int = 100

    # Logging
    log_level: str = "INFO"
    log_file: str = "orderbook_sim.log"
