"""Configuration from environment."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env"))

# file | redis | memory
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "file").strip().lower()
STORAGE_PATH = os.environ.get("STORAGE_PATH", ".dashboard_state.json")
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")

TASKS_KEY = os.environ.get("TASKS_KEY", "taskflow-tasks")
TICKETS_KEY = os.environ.get("TICKETS_KEY", "tickets")

BOUNDARY_CHECK_INTERVAL = float(os.environ.get("BOUNDARY_CHECK_INTERVAL", "30"))
SEED_TICKET_COUNT = int(os.environ.get("SEED_TICKET_COUNT", "50"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def get_seed() -> Optional[int]:
    """Random seed for generated demo data; unset means nondeterministic."""
    raw = (os.environ.get("SEED") or "").strip()
    return int(raw) if raw else None
