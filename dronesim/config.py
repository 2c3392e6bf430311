from pathlib import Path
import logging
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


def setup_logging(log_level: str | int = "INFO", log_file: Path | None = None) -> None:
    """Centralized logging configuration with environment variable support"""
    level = (
        log_level
        if isinstance(log_level, int)
        else getattr(logging, log_level.upper(), logging.INFO)
    )
    log_path = (log_file or (BASE_DIR.parent / "dronesim.log")).resolve()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    has_file_handler = False
    has_stream_handler = False

    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            existing_path = Path(getattr(handler, "baseFilename", "")).resolve()
            if existing_path == log_path:
                has_file_handler = True
        elif isinstance(handler, logging.StreamHandler):
            has_stream_handler = True

    if not has_file_handler:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if not has_stream_handler:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    listen_port: int = 3000  # commands
    socket_port: int = 3070  # realtime telemetry
    bind_host: str = "0.0.0.0"

    drone_name: str = "drone"
    drone_id: int = 9
    top_speed: float = Field(default=0.000129726, gt=0)
    latitude: float = -33.937687
    longitude: float = 151.19189864
    altitude: float = 0.0

    initial_battery: float = 10800.0
    battery_decrement: float = Field(default=0.01, gt=0)
    tick_interval_sec: float = Field(default=2.0, ge=0)

    command_queue_size: int = Field(default=2, ge=1)
    sink_buffer_size: int = Field(default=2, ge=1)

    mqtt_enabled: bool = True
    mqtt_broker: str = "localhost"
    mqtt_port: int = 1883
    mqtt_user: str = ""
    mqtt_pass: str = ""
    mqtt_use_tls: bool = False
    mqtt_ca_certs: str = ""
    telemetry_topic_prefix: str = "drone"

    log_level: str = "INFO"


settings = Settings()
