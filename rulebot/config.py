"""
Environment configuration.

  RULEBOT_DEFINITION        path to a .json or .xml state graph
  RULEBOT_INITIAL_LEVEL     entry state id (default "0")
  RULEBOT_INVALID_POLICY    "round_robin" | "random"
  RULEBOT_ECHO_PROMPT       "1"/"0": reply with the successor prompt on transitions
  RULEBOT_WEATHER_URL       base URL of a wttr.in compatible service
  RULEBOT_WEATHER_TIMEOUT   seconds
  RULEBOT_LOG_LEVEL         logging level name
"""

import os
from typing import Mapping, Optional

from rulebot.models.config import BotConfig

ENV_FIELDS = {
    "RULEBOT_DEFINITION": "definition_path",
    "RULEBOT_INITIAL_LEVEL": "initial_level",
    "RULEBOT_INVALID_POLICY": "invalid_answer_policy",
    "RULEBOT_ECHO_PROMPT": "echo_successor_prompt",
    "RULEBOT_WEATHER_URL": "weather_base_url",
    "RULEBOT_WEATHER_TIMEOUT": "weather_timeout_seconds",
    "RULEBOT_LOG_LEVEL": "log_level",
}


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> BotConfig:
    """Build a BotConfig from RULEBOT_* variables, then explicit overrides."""
    environ = os.environ if environ is None else environ

    values = {}
    for env_var, field_name in ENV_FIELDS.items():
        raw = environ.get(env_var, "").strip()
        if raw:
            values[field_name] = raw

    values.update({k: v for k, v in overrides.items() if v is not None})
    return BotConfig.model_validate(values)
