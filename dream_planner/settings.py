# dream_planner/settings.py
import os

from dotenv import load_dotenv

load_dotenv()

# --- LLM ---
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "your-project-id")
REGION = os.getenv("GOOGLE_CLOUD_REGION", "us-central1")
PLANNER_MODEL = os.getenv("PLANNER_MODEL", "gemini-2.5-flash-lite")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))

# JSON-with-comments file overriding the generation presets (optional)
PLANNER_CONFIG_PATH = os.getenv("PLANNER_CONFIG_PATH")

# --- Storage ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///dream_planner.db")

# --- Misc ---
CURRENCY = os.getenv("CURRENCY", "USD")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
