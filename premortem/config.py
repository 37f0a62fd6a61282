"""Pre-Mortem settings: built-in defaults overlaid with config.yaml.

GOOGLE_API_KEY and friends come from a .env next to the package. Set
PREMORTEM_CONFIG to point at a different YAML file.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

_PACKAGE_DIR = Path(__file__).resolve().parent
load_dotenv(_PACKAGE_DIR.parent / ".env")

DEFAULTS = {
    "roadmap_model": "gemini-2.5-flash",
    "inversion_model": "gemini-2.5-flash",
    "inversion_temperature": 0,
    "llm_max_retries": 3,
    "default_doom_level": 5,
    "fallback_selection_size": 3,
    "output_path": "./output/blueprint.md",
}


def load_config(path: Path) -> dict:
    """Read a YAML settings file and lay it over DEFAULTS.

    A missing or empty file yields the defaults. Unknown keys are kept.
    """
    if not path.exists():
        return dict(DEFAULTS)
    loaded = yaml.safe_load(path.read_text()) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{path} must contain a YAML mapping.")
    return {**DEFAULTS, **loaded}


CONFIG_PATH = Path(os.environ.get("PREMORTEM_CONFIG") or _PACKAGE_DIR / "config.yaml")

_config = load_config(CONFIG_PATH)


def get_config() -> dict:
    return _config
