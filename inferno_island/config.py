"""Global configuration (synthesizer choice, LLM connection, auto-play timing).

Resolution order, lowest to highest:
  1. _CONFIG_DEFAULTS
  2. the JSON file at ``path`` (default: $DATA_DIR/config.json)
  3. environment variables, including those loaded from .env
"""

import json
import logging
import os
import random
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from inferno_island.llm import HttpLLM
from inferno_island.synth import LLMSynthesizer, RuleBasedSynthesizer, Synthesizer

logger = logging.getLogger(__name__)

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"

_CONFIG_DEFAULTS: dict[str, Any] = {
    "synthesizer": "rules",
    "llm_connection": {
        "provider_url": "https://api.anthropic.com",
        "api_key": "",
        "provider_format": "anthropic",
        "model": "",
        "timeout": 120.0,
    },
    "autoplay": {
        "speed": 8.0,
        "ceremony_delay": 2.0,
    },
    "recent_event_window": 5,
}

# env var -> (section or None, key, type)
_ENV_OVERRIDES: dict[str, tuple[str | None, str, type]] = {
    "INFERNO_SYNTHESIZER": (None, "synthesizer", str),
    "LLM_PROVIDER_URL": ("llm_connection", "provider_url", str),
    "LLM_API_KEY": ("llm_connection", "api_key", str),
    "LLM_PROVIDER_FORMAT": ("llm_connection", "provider_format", str),
    "LLM_MODEL": ("llm_connection", "model", str),
    "LLM_TIMEOUT": ("llm_connection", "timeout", float),
    "AUTOPLAY_SPEED": ("autoplay", "speed", float),
}


def config_path() -> Path:
    return Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR))) / "config.json"


def _merge(config: dict[str, Any], fields: dict[str, Any]) -> None:
    for key, value in fields.items():
        if key not in config:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        if isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = value


def _apply_env(config: dict[str, Any]) -> None:
    for var, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = os.getenv(var)
        if not raw:
            continue
        try:
            value = cast(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: expected %s", var, raw, cast.__name__)
            continue
        if section is None:
            config[key] = value
        else:
            config[section][key] = value


def _stored(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    return json.loads(path.read_text())


def get_config(path: Path | None = None) -> dict[str, Any]:
    """Read config, returning defaults merged with stored values and env overrides."""
    config: dict[str, Any] = json.loads(json.dumps(_CONFIG_DEFAULTS))
    _merge(config, _stored(path or config_path()))
    _apply_env(config)
    return config


def preview_config(fields: dict[str, Any], path: Path | None = None) -> dict[str, Any]:
    """The effective config update_config would produce, without writing it."""
    config: dict[str, Any] = json.loads(json.dumps(_CONFIG_DEFAULTS))
    _merge(config, _stored(path or config_path()))
    _merge(config, fields)
    _apply_env(config)
    return config


def update_config(fields: dict[str, Any], path: Path | None = None) -> dict[str, Any]:
    """Merge fields into the stored config and persist. Returns the effective config.

    Environment overrides are not written back to the file.
    """
    path = path or config_path()
    stored: dict[str, Any] = json.loads(json.dumps(_CONFIG_DEFAULTS))
    _merge(stored, _stored(path))
    _merge(stored, fields)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(stored, indent=2))
    return get_config(path)


def build_synthesizer(
    config: dict[str, Any], rng: random.Random | None = None
) -> Synthesizer:
    """Create the synthesizer named by ``config["synthesizer"]`` ("rules" or "llm")."""
    kind = config.get("synthesizer", "rules")
    if kind == "rules":
        return RuleBasedSynthesizer(rng)
    if kind == "llm":
        conn = config["llm_connection"]
        if not conn.get("provider_url"):
            raise ValueError("synthesizer 'llm' needs llm_connection.provider_url")
        return LLMSynthesizer(
            HttpLLM(
                provider_url=conn["provider_url"],
                api_key=conn.get("api_key", ""),
                provider_format=conn.get("provider_format", "koboldcpp"),
                model=conn.get("model", ""),
                timeout=float(conn.get("timeout", 120.0)),
            )
        )
    raise ValueError(f"Unknown synthesizer: {kind!r}")
