"""
Configuration for Variant Grouping

Defaults, overlaid by an optional JSON file, overlaid by environment
variables (a local .env file is read first).
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/variant_grouping.json")

DEFAULT_CONFIG = {
    "catalogue": {
        "api_url": "http://localhost:8000",
        "endpoint": "/products/catalogue/all_products",
        "per_page": 200,
        "timeout": 30,
        "group_by_name": True,
        "sort": "default",
    },
    "output_dir": "outputs/variant_grouping",
    "report_limit": 20,
}

# env var -> (section, key, cast)
ENV_OVERRIDES = {
    "CATALOGUE_API_URL": ("catalogue", "api_url", str),
    "CATALOGUE_PER_PAGE": ("catalogue", "per_page", int),
    "CATALOGUE_TIMEOUT": ("catalogue", "timeout", float),
}


def merge_dict(base: Dict[str, object], override: Dict[str, object]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_dict(base[key], value)  # type: ignore[arg-type]
        else:
            base[key] = value


def apply_env_overrides(config: Dict[str, object], environ: Optional[Dict[str, str]] = None) -> None:
    environ = os.environ if environ is None else environ
    for env_key, (section, key, cast) in ENV_OVERRIDES.items():
        raw = environ.get(env_key)
        if raw is None or raw == "":
            continue
        try:
            config[section][key] = cast(raw)  # type: ignore[index]
        except ValueError as exc:
            raise ValueError(f"Invalid value for {env_key}: {raw!r}") from exc


def load_config(path: Optional[Path] = None, use_env: bool = True) -> Dict[str, object]:
    config = json.loads(json.dumps(DEFAULT_CONFIG))  # deep copy through json
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    if path.exists():
        with path.open("r", encoding="utf-8") as handle:
            user_config = json.load(handle)
        merge_dict(config, user_config)
        logger.debug("Loaded config overrides from %s", path)
    if use_env:
        load_dotenv(find_dotenv(usecwd=True))
        apply_env_overrides(config)
    return config
