# Shared application constants

# --- Key Store Configuration ---
# These values can be monkeypatched in tests to redirect storage.
DEFAULT_KEYSTORE_DIR = "~/.sig-tool"
KEYSTORE_ENV_VAR = "SIGTOOL_KEYSTORE"

# --- Logging ---
LOG_LEVEL_ENV_VAR = "SIGTOOL_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# --- Entropy ---
ENTROPY_ATTEMPTS = 3
ENTROPY_RETRY_DELAY = 0.05  # seconds, doubled after each failed attempt
BLS_IKM_SIZE = 32

# --- Persisted formats ---
KEY_FILE_VERSION = 1
SIGNATURE_FILE_VERSION = 1
KEY_FILE_SUFFIX = ".json"
KEY_NAME_PATTERN = r"[A-Za-z0-9][A-Za-z0-9._-]{0,127}"
