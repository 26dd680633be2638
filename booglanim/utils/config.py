import os
from typing import Any, Dict, Optional

from pathlib import Path

try:
    import yaml
except Exception as e:  # pragma: no cover
    raise RuntimeError("PyYAML is required: pip install pyyaml") from e

from dotenv import load_dotenv
from pydantic import ValidationError

from booglanim.config.schemas import StudioConfig
from booglanim.errors import ConfigError
from booglanim.utils.logs import get_logger

log = get_logger("config")

DEFAULT_CONFIG_PATH = "conf/studio.yaml"


def _read_yaml(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"YAML at {path} must be a mapping/object.")
    return data


def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(a)
    for k, v in (b or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overlay() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if os.getenv("BOOGLANIM_MAX_FRAMES"):
        try:
            out.setdefault("build", {})["max_frames"] = int(
                os.getenv("BOOGLANIM_MAX_FRAMES") or 0
            )
        except ValueError:
            log.warning("ignoring non-integer BOOGLANIM_MAX_FRAMES")
    if os.getenv("BOOGLANIM_POLL_INTERVAL"):
        try:
            out.setdefault("build", {})["poll_interval_sec"] = float(
                os.getenv("BOOGLANIM_POLL_INTERVAL") or 0
            )
        except ValueError:
            log.warning("ignoring non-numeric BOOGLANIM_POLL_INTERVAL")
    if os.getenv("BOOGLANIM_RESOURCE_ROOT"):
        out.setdefault("paths", {})["resource_root"] = os.getenv("BOOGLANIM_RESOURCE_ROOT")
    if os.getenv("BOOGLANIM_AUDIT_LOG"):
        out.setdefault("paths", {})["audit_log"] = os.getenv("BOOGLANIM_AUDIT_LOG")
    return out


def load_studio_config(
    path: str = DEFAULT_CONFIG_PATH, *, cli_overrides: Optional[Dict[str, Any]] = None
) -> StudioConfig:
    """
    Load and validate the studio configuration.
    Precedence (low -> high):
      1) Defaults baked into models
      2) conf/studio.yaml
      3) Environment variables (after .env is loaded)
      4) CLI overrides
    """
    load_dotenv()
    merged = _read_yaml(path)
    merged = _deep_merge(merged, _env_overlay())
    if cli_overrides:
        merged = _deep_merge(merged, cli_overrides)
    try:
        return StudioConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid studio configuration in {path}: {e}") from e
