"""Bot configuration."""

from typing import Literal, Optional, get_args

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
LOG_LEVELS = get_args(LogLevel)


class BotConfig(BaseModel):
    """Configuration for the engine and its hosts."""

    initial_level: str = "0"
    reset_level: str = "1"
    definition_path: Optional[str] = None   # JSON or XML; built-in graph when unset
    invalid_answer_policy: Literal["round_robin", "random"] = "round_robin"
    echo_successor_prompt: bool = True      # False: non-terminal transitions reply ""
    weather_base_url: str = "https://wttr.in"
    weather_timeout_seconds: float = Field(gt=0, default=5.0)
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value
