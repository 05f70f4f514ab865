# follicle_backend/app/config/paths.py
from __future__ import annotations

"""
Central path resolution for the match-scoring backend.

Env overrides:
    DATA_DIR
    MATCHING_RULES_DIR

Defaults:
    <repo_root>/data
    <repo_root>/follicle_backend/app/matching/rules

Exports:
    - constants: DATA_DIR, MATCHING_RULES_DIR, REPO_ROOT, APP_ROOT
    - getters: get_*()
    - resolvers: resolve_rules_file(), resolve_data_file()
    - helpers: path_under_data(), ensure_data_dir_exists(), current_data_dir()
"""

import os
from pathlib import Path
from typing import Dict

# ──────────────────────────────────────────────────────────────────────────────
_THIS_FILE = Path(__file__).resolve()

def _resolve_repo_root() -> Path:
    p = _THIS_FILE
    for _ in range(6):
        if (p.parent / "follicle_backend" / "app").exists():
            return p.parent
        p = p.parent
    return _THIS_FILE.parents[3]

REPO_ROOT: Path = _resolve_repo_root()
APP_ROOT: Path = REPO_ROOT / "follicle_backend" / "app"

def _clean_env(value: str | None) -> str | None:
    if value is None:
        return None
    v = value.strip().strip('"').strip("'")
    return v or None

def _env_path(name: str) -> Path | None:
    raw = _clean_env(os.getenv(name))
    if not raw:
        return None
    return Path(raw).expanduser().resolve()

_default_data = REPO_ROOT / "data"
_default_rules = APP_ROOT / "matching" / "rules"

DATA_DIR: Path = (_env_path("DATA_DIR") or _default_data).resolve()
MATCHING_RULES_DIR: Path = (_env_path("MATCHING_RULES_DIR") or _default_rules).resolve()

# ── Getters
def get_repo_root() -> Path: return REPO_ROOT
def get_app_root()  -> Path: return APP_ROOT
def get_rules_dir() -> Path: return MATCHING_RULES_DIR

def current_data_dir() -> Path:
    """
    DATA_DIR as seen right now. Stores resolve their root through this so a
    test (or a worker) can point DATA_DIR somewhere else after import.
    """
    return _env_path("DATA_DIR") or DATA_DIR

# ── Resolvers
def resolve_rules_file(name: str) -> Path:
    """Return absolute path under the matching rules dir for a given filename."""
    return MATCHING_RULES_DIR / name

def resolve_data_file(*parts: str) -> Path:
    """Return absolute path under DATA_DIR for nested parts and ensure parent exists."""
    p = current_data_dir().joinpath(*parts)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p

def get_paths() -> Dict[str, Path]:
    return {
        "DATA_DIR": current_data_dir(),
        "MATCHING_RULES_DIR": MATCHING_RULES_DIR,
        "REPO_ROOT": REPO_ROOT,
        "APP_ROOT": APP_ROOT,
    }

def path_under_data(*parts: str) -> Path:
    return resolve_data_file(*parts)

def ensure_data_dir_exists(*parts: str) -> Path:
    """
    Ensure DATA_DIR (and optional subpaths) exist.
    Examples:
        ensure_data_dir_exists() -> <DATA_DIR>
        ensure_data_dir_exists("store") -> <DATA_DIR>/store
    """
    p = current_data_dir().joinpath(*parts)
    p.mkdir(parents=True, exist_ok=True)
    return p

__all__ = [
    # constants
    "DATA_DIR", "MATCHING_RULES_DIR", "REPO_ROOT", "APP_ROOT",
    # getters
    "get_repo_root", "get_app_root", "get_rules_dir", "current_data_dir",
    # resolvers
    "resolve_rules_file", "resolve_data_file",
    # helpers
    "get_paths", "path_under_data", "ensure_data_dir_exists",
]
