"""
Configuration Management Module

Handles scrape tuning options and output locations.

This module handles:
- .env loading via python-dotenv
- Scrape options with environment variable priority over config.json
- Bounds clamping for the documented option ranges
- Output/download directory resolution
"""

import os
import json
from dataclasses import dataclass, asdict, fields
from dotenv import load_dotenv

from .logging import logger

# Load environment variables from .env file at the start
load_dotenv()

CONFIG_FILE = "config.json"
DATA_DIR = "data"
DEFAULT_DOWNLOADS_DIR = os.path.join(DATA_DIR, "downloads")
DEBUG_DIR = os.path.join(DATA_DIR, "temp", "debug")

ENV_PREFIX = "NOVEL_SAVER_"

# (min, max) for options with documented bounds; None means unbounded on that side
OPTION_BOUNDS = {
    "volume_size": (1, 1000),
    "batch_size": (1, 100),
    "request_delay": (50, 5000),
    "concurrency": (1, None),
    "timeout_ms": (1, None),
    "retry_times": (0, None),
    "jitter_min": (0, None),
    "jitter_max": (0, None),
}


@dataclass
class ScrapeConfig:
    volume_size: int = 100          # chapters per output volume
    batch_size: int = 50            # chapters per fetch batch
    request_delay: int = 150        # ms paced after each chapter
    concurrency: int = 10           # in-flight fetches per batch
    timeout_ms: int = 15000         # per-fetch timeout
    retry_times: int = 2            # extra attempts per chapter
    jitter_min: int = 30            # ms
    jitter_max: int = 80            # ms
    clean_empty_lines: bool = True
    download_path: str = ""         # output subfolder name
    save_failed_pages: bool = False

    def clamped(self):
        """Return a copy with every bounded option forced into range."""
        values = asdict(self)
        for name, (low, high) in OPTION_BOUNDS.items():
            value = values[name]
            if low is not None and value < low:
                logger.warning(f"[CONFIG] {name}={value} below minimum, using {low}")
                value = low
            if high is not None and value > high:
                logger.warning(f"[CONFIG] {name}={value} above maximum, using {high}")
                value = high
            values[name] = value
        if values["jitter_min"] > values["jitter_max"]:
            values["jitter_min"], values["jitter_max"] = values["jitter_max"], values["jitter_min"]
        return ScrapeConfig(**values)


def _read_config_file(config_path=CONFIG_FILE):
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"[CONFIG] Could not read {config_path}: {e}")
    return {}


def get_config_value(key, default=None, config_path=CONFIG_FILE):
    """Get a configuration value from config.json with fallback to default."""
    return _read_config_file(config_path).get(key, default)


def _coerce(value, target_type):
    if target_type is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if target_type is int:
        return int(value)
    return str(value)


def load_scrape_config(overrides=None, config_path=CONFIG_FILE):
    """Load scrape options.

    Priority: explicit overrides > NOVEL_SAVER_* environment variables >
    config.json "scrape_config" > defaults. Unparseable values are logged
    and skipped.
    """
    file_values = _read_config_file(config_path).get("scrape_config", {}) or {}
    overrides = overrides or {}
    values = {}

    for field in fields(ScrapeConfig):
        target_type = type(getattr(ScrapeConfig(), field.name))
        env_value = os.getenv(ENV_PREFIX + field.name.upper())

        for source, raw in (("override", overrides.get(field.name)),
                            ("environment", env_value),
                            ("config file", file_values.get(field.name))):
            if raw is None:
                continue
            try:
                values[field.name] = _coerce(raw, target_type)
                logger.debug(f"[CONFIG] {field.name}={values[field.name]!r} from {source}")
                break
            except (TypeError, ValueError):
                logger.warning(f"[CONFIG] Ignoring invalid {field.name}={raw!r} from {source}")

    return ScrapeConfig(**values).clamped()


def get_output_dir(config_path=CONFIG_FILE):
    """Directory the durable writer writes into, or None when not configured."""
    output_dir = os.getenv(ENV_PREFIX + "OUTPUT_DIR")
    if output_dir:
        return output_dir
    return get_config_value("output_dir", None, config_path)


def get_downloads_dir(config_path=CONFIG_FILE):
    """Directory the fallback downloader saves into."""
    downloads_dir = os.getenv(ENV_PREFIX + "DOWNLOADS_DIR")
    if downloads_dir:
        return downloads_dir
    return get_config_value("downloads_dir", DEFAULT_DOWNLOADS_DIR, config_path)


def show_config_status(config=None):
    """One-line summary of the active configuration for CLI and dashboard."""
    config = config or load_scrape_config()
    output_dir = get_output_dir()
    target = f"📁 {output_dir}" if output_dir else f"⬇️ {get_downloads_dir()} (no output directory configured)"
    return (f"volume={config.volume_size} batch={config.batch_size} "
            f"delay={config.request_delay}ms concurrency={config.concurrency} → {target}")
