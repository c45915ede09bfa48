import json
import os
import sys
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from loguru import logger

from resume_templates import DEFAULT_COLOR, DEFAULT_TEMPLATE

load_dotenv()  # Load .env file if present


def load_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def resolve_from_config(cfg: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Merge a config.json payload with environment overrides and defaults."""
    cfg = cfg or {}
    return {
        "template": os.getenv("RESUME_TEMPLATE") or cfg.get("template", DEFAULT_TEMPLATE),
        "color": os.getenv("RESUME_COLOR") or cfg.get("color", DEFAULT_COLOR),
        "output_dir": os.getenv("RESUME_OUTPUT_DIR") or cfg.get("output_dir", "output"),
        "log_level": (os.getenv("RESUME_LOG_LEVEL") or cfg.get("log_level", "INFO")).upper(),
        "reject_phone_title": _env_flag(
            "RESUME_REJECT_PHONE_TITLE", bool(cfg.get("reject_phone_title", False))
        ),
        "host": cfg.get("host", "127.0.0.1"),
        "port": int(os.getenv("PORT") or cfg.get("port", 5000)),
    }


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """Resolve settings from an optional JSON file plus the environment."""
    cfg = load_json(path) if path and path.exists() else {}
    return resolve_from_config(cfg)


def configure_logging(level: str = "INFO") -> None:
    """Send loguru output to stderr at the given level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )
