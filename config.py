import os
import sys

from dotenv import load_dotenv

# Load .env but don't override existing environment variables
# This allows test scripts to set values before import
load_dotenv(".env", override=False)

# Backend API
API_URL = os.environ.get("API_URL", "http://localhost:8085").rstrip("/")

# Request timeout is inherited from the HTTP client unless configured explicitly
_http_timeout_str = os.environ.get("HTTP_TIMEOUT_SECONDS")
HTTP_TIMEOUT_SECONDS = float(_http_timeout_str) if _http_timeout_str else None

# Session storage backend: "memory" keeps the session for the process lifetime,
# "database" persists it in a SQLite file under data/
SESSION_STORAGE_BACKENDS = ("memory", "database")
SESSION_STORAGE_BACKEND = os.environ.get("SESSION_STORAGE_BACKEND", "database").lower()
if SESSION_STORAGE_BACKEND not in SESSION_STORAGE_BACKENDS:
    print(f"\n ERROR: Invalid SESSION_STORAGE_BACKEND configuration\n", file=sys.stderr)
    print(f"Valid values: {', '.join(SESSION_STORAGE_BACKENDS)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('SESSION_STORAGE_BACKEND')}", file=sys.stderr)
    print(f"\nAdd to .env: SESSION_STORAGE_BACKEND={SESSION_STORAGE_BACKENDS[0]}\n", file=sys.stderr)
    sys.exit(1)

SESSION_DB_NAME = os.environ.get("SESSION_DB_NAME", "session.db")

# Encrypt stored session values (token, user profile) with AES-256-GCM
SESSION_ENCRYPTION = os.environ.get("SESSION_ENCRYPTION", "false") == "true"
SESSION_ENCRYPTION_SECRET = os.environ.get("SESSION_ENCRYPTION_SECRET", "")  # Validated at startup

# Notifications (toast messages) are hidden automatically after this many seconds
NOTIFICATION_DISMISS_SECONDS = float(os.environ.get("NOTIFICATION_DISMISS_SECONDS", "3"))

STORE_LANGUAGE = os.environ.get("STORE_LANGUAGE", "en")  # Default to English

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask tokens and PII in logs
LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
