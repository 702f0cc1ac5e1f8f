"""Identifier generators for tasks and tickets."""

import random
import string
from datetime import datetime

_BASE36 = string.digits + string.ascii_lowercase


def generate_task_id(now: datetime, rng: random.Random) -> str:
    suffix = "".join(rng.choice(_BASE36) for _ in range(6))
    return f"task-{int(now.timestamp() * 1000)}-{suffix}"


def generate_ticket_id(rng: random.Random) -> str:
    return f"TKT-{rng.randint(100000, 999999)}"
