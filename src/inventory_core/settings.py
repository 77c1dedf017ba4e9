import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data/sample")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- Refresh ---
# Notifications arriving inside this window collapse into one recompute.
REFRESH_DEBOUNCE_SECONDS = float(os.getenv("REFRESH_DEBOUNCE_SECONDS", "0.35"))

# --- Serving Conversion ---
STANDARD_SERVING_ML = float(os.getenv("STANDARD_SERVING_ML", "30"))
DEFAULT_CONTAINER_ML = float(os.getenv("DEFAULT_CONTAINER_ML", "700"))

# --- Timestamps ---
# Aware timestamps are converted to this zone before grouping by day.
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "UTC")

# --- Insights ---
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
