"""Project-wide constants (storage defaults, key format, sweep timing)."""

DEFAULT_BLOB_STORAGE_PATH: str = "/app/data/blobs"
DEFAULT_DATABASE_PATH: str = "/app/data/metadata.db"

BLOB_SUFFIX: str = ".blob"
STREAM_PIECE_SIZE: int = 64 * 1024

API_KEY_PREFIX: str = "sd_"

# Keeps "<id>.blob" under the usual 255-byte filename limit.
MAX_FILE_ID_LENGTH: int = 200

SWEEP_INTERVAL_SECONDS: int = 6 * 3600
SWEEP_GRACE_SECONDS: int = 15 * 60

SQLITE_BUSY_TIMEOUT_MS: int = 5000
