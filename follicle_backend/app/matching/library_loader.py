# follicle_backend/app/matching/library_loader.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import yaml  # PyYAML

from follicle_backend.app.config.paths import resolve_rules_file
from follicle_backend.app.utils.logs import get_logger

log = get_logger("library_loader")

# -----------------------------------------------------------------------------
# Internal IO helpers
# -----------------------------------------------------------------------------
def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")

def _load_yaml_from(path: Path) -> Any:
    try:
        txt = _read_text(path)
        return yaml.safe_load(txt)
    except FileNotFoundError:
        raise
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

# -----------------------------------------------------------------------------
# Public loader API (rules)
# -----------------------------------------------------------------------------
@lru_cache(maxsize=16)
def load_yaml_rules(filename: str) -> Any:
    """
    Load a YAML rulebook from matching/rules.
    Raises FileNotFoundError if not present.
    """
    path = resolve_rules_file(filename)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")
    obj = _load_yaml_from(path)
    log.info(f"[rules] loaded {filename} from {path}")
    return obj

def has_rules_file(filename: str) -> bool:
    return resolve_rules_file(filename).exists()

# -----------------------------------------------------------------------------
# Convenience accessors for well-known files
# -----------------------------------------------------------------------------
_RULES_INGREDIENT_PROFILES = "ingredient_profiles.yaml"
_RULES_SCORING_POLICY = "scoring_policy.yaml"  # optional

def _norm_list(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    return [str(i).strip().lower() for i in items if str(i).strip()]

@lru_cache(maxsize=1)
def get_ingredient_profiles() -> Dict[str, Dict[str, Dict[str, List[str]]]]:
    """
    Returns {attribute: {value: {"beneficial": [...], "avoid": [...]}}} (required).

    Lists keep their file order; entries are lower-cased so matching can
    compare against normalized product ingredients directly.
    """
    raw = load_yaml_rules(_RULES_INGREDIENT_PROFILES)
    if not isinstance(raw, dict):
        raise ValueError(f"{_RULES_INGREDIENT_PROFILES} must map attribute -> value -> lists")
    out: Dict[str, Dict[str, Dict[str, List[str]]]] = {}
    for attribute, values in raw.items():
        if not isinstance(values, dict):
            log.info(f"[rules] attribute {attribute!r} had unexpected schema; ignoring.")
            continue
        out[str(attribute)] = {
            str(value): {
                "beneficial": _norm_list((entry or {}).get("beneficial")),
                "avoid": _norm_list((entry or {}).get("avoid")),
            }
            for value, entry in values.items()
        }
    return out

def get_scoring_policy_overrides() -> Dict[str, Any]:
    """
    Returns the optional policy overrides, else {}.
    """
    if not has_rules_file(_RULES_SCORING_POLICY):
        log.info(f"[rules] optional file missing: {_RULES_SCORING_POLICY}; using defaults.")
        return {}
    data = load_yaml_rules(_RULES_SCORING_POLICY)
    return data if isinstance(data, dict) else {}

# -----------------------------------------------------------------------------
# Debug / inventory helpers
# -----------------------------------------------------------------------------
def inventory() -> Dict[str, Any]:
    """
    Return a light inventory of what's available. Safe to call from a health or debug route.
    """
    return {
        "rules": {
            "ingredient_profiles": has_rules_file(_RULES_INGREDIENT_PROFILES),
            "scoring_policy": has_rules_file(_RULES_SCORING_POLICY),
        },
    }
