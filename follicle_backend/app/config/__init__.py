# follicle_backend/app/config/__init__.py
from __future__ import annotations

# Re-export config surface expected by callers across the app.

# DB and misc settings live in manifest.py
from .manifest import (
    DB_URL,
    APP_ENV,
    DEBUG_MODE,
    validate_manifest,
)

# Path helpers live in paths.py
from .paths import (
    REPO_ROOT,
    APP_ROOT,
    DATA_DIR,
    MATCHING_RULES_DIR,
    current_data_dir,
    resolve_rules_file,
    resolve_data_file,
    path_under_data,
    ensure_data_dir_exists,
)

__all__ = [
    # manifest
    "DB_URL",
    "APP_ENV",
    "DEBUG_MODE",
    "validate_manifest",
    # paths
    "REPO_ROOT",
    "APP_ROOT",
    "DATA_DIR",
    "MATCHING_RULES_DIR",
    "current_data_dir",
    "resolve_rules_file",
    "resolve_data_file",
    "path_under_data",
    "ensure_data_dir_exists",
]
