import json
import logging
import os
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from .username_generator import MIN_USERNAME_LENGTH


class Settings(BaseModel):
    min_length: int = MIN_USERNAME_LENGTH
    max_length: int = 12
    # None selects the default replacement table
    replacement_rules: Optional[Dict[str, str]] = None
    log_level: str = "INFO"


def _parse_rules(raw: str) -> Dict[str, str]:
    try:
        rules = json.loads(raw)
    except ValueError as e:
        raise RuntimeError("USERGEN_REPLACEMENT_RULES must be a JSON object") from e
    if not isinstance(rules, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in rules.items()
    ):
        raise RuntimeError("USERGEN_REPLACEMENT_RULES must map strings to strings")
    return rules


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    values: Dict[str, object] = {}
    if env.get("USERGEN_MIN_LENGTH"):
        values["min_length"] = int(env["USERGEN_MIN_LENGTH"])
    if env.get("USERGEN_MAX_LENGTH"):
        values["max_length"] = int(env["USERGEN_MAX_LENGTH"])
    if env.get("USERGEN_REPLACEMENT_RULES"):
        values["replacement_rules"] = _parse_rules(env["USERGEN_REPLACEMENT_RULES"])
    if env.get("USERGEN_LOG_LEVEL"):
        values["log_level"] = env["USERGEN_LOG_LEVEL"].upper()
    return Settings(**values)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
