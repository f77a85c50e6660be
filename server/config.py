"""Configuration settings for the ShareDrive server."""

import os

from common.constants import (
    DEFAULT_DATABASE_PATH,
    SWEEP_GRACE_SECONDS,
    SWEEP_INTERVAL_SECONDS,
)


DATABASE_PATH = os.environ.get("SHAREDRIVE_DATABASE_PATH", DEFAULT_DATABASE_PATH)

SERVER_HOST = os.environ.get("SHAREDRIVE_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("SHAREDRIVE_PORT", "8000"))

# Answer forbidden file access with the same 404 body as a missing file
CONCEAL_FORBIDDEN = os.environ.get("SHAREDRIVE_CONCEAL_FORBIDDEN", "true").lower() in ("1", "true", "yes")

MAX_UPLOAD_BYTES = int(os.environ.get("SHAREDRIVE_MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))

SWEEP_INTERVAL = int(os.environ.get("SHAREDRIVE_SWEEP_INTERVAL", str(SWEEP_INTERVAL_SECONDS)))

SWEEP_GRACE = int(os.environ.get("SHAREDRIVE_SWEEP_GRACE", str(SWEEP_GRACE_SECONDS)))
