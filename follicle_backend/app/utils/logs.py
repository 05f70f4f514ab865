# follicle_backend/app/utils/logs.py
from __future__ import annotations

import logging

_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Purpose:
# One named logger per subsystem ("follicle.<name>") with a single stream handler.
# Repeated calls return the same logger without stacking handlers.
def get_logger(name: str) -> logging.Logger:
    log = logging.getLogger(f"follicle.{name}")
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FMT))
        log.addHandler(handler)
        log.setLevel(logging.INFO)
    return log
