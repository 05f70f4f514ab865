# follicle_backend/app/config/manifest.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

# ---- DB settings and environment mode ----
from .paths import REPO_ROOT

_DEFAULT_SQLITE_PATH: Path = (REPO_ROOT / "follicle.sqlite3").resolve()
_env_db_url = os.getenv("DATABASE_URL", "").strip()

# Exported DB_URL (used by db/session.py)
DB_URL: str = _env_db_url or f"sqlite:///{_DEFAULT_SQLITE_PATH}"

# Optional env flags
APP_ENV: str = os.getenv("APP_ENV", "development")
DEBUG_MODE: bool = os.getenv("DEBUG", "0") not in ("", "0", "false", "False")

# ---- Rulebook validation manifest ----
RULES_REQUIRED: List[str] = [
    "ingredient_profiles.yaml",
]

RULES_OPTIONAL: List[str] = [
    "scoring_policy.yaml",
]

def validate_manifest() -> Dict[str, object]:
    # loader imports config.paths; import here to keep package init acyclic
    from follicle_backend.app.matching.library_loader import has_rules_file, inventory

    inv = inventory()

    missing_required = [name for name in RULES_REQUIRED if not has_rules_file(name)]
    missing_optional = [name for name in RULES_OPTIONAL if not has_rules_file(name)]

    status = "ok" if not missing_required else "missing_required"
    return {
        "status": status,
        "app_env": APP_ENV,
        "inventory": inv,
        "required": RULES_REQUIRED,
        "optional": RULES_OPTIONAL,
        "missing_required": missing_required,
        "missing_optional": missing_optional,
    }


__all__ = ["DB_URL", "APP_ENV", "DEBUG_MODE", "RULES_REQUIRED", "RULES_OPTIONAL", "validate_manifest"]
