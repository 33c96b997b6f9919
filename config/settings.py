"""
config/settings.py
Central configuration — reads from environment variables and .env file.
"""
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings:

    def __init__(self):
        self._load()

    def _load(self):
        import os
        env_file = BASE_DIR / ".env"
        if env_file.exists():
            for line in env_file.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, _, val = line.partition("=")
                    os.environ.setdefault(key.strip(), val.strip())

        self.api_host    = os.environ.get("API_HOST", "0.0.0.0")
        self.api_port    = int(os.environ.get("API_PORT", "8000"))
        self.api_title   = "Dry Bulk Matching API"
        self.api_version = "1.0.0"

        self.metrics_port = int(os.environ.get("METRICS_PORT", "9090"))
        self.log_level    = os.environ.get("LOG_LEVEL", "INFO")
        self.log_json     = os.environ.get("LOG_JSON", "false").lower() in ("1", "true", "yes")

        # Compatibility retrieval (requirement → listings)
        self.match_threshold_pct = float(os.environ.get("MATCH_THRESHOLD_PCT", "60"))
        self.match_result_limit  = int(os.environ.get("MATCH_RESULT_LIMIT", "3"))
        self.match_cache_size    = int(os.environ.get("MATCH_CACHE_SIZE", "50"))
        self.laycan_buffer_days  = int(os.environ.get("LAYCAN_BUFFER_DAYS", "5"))
        self.matchable_statuses  = ("available", "pending")

        # Proximity
        self.proximity_max_nm = float(os.environ.get("PROXIMITY_MAX_NM", "500"))


settings = Settings()
