"""Turn cost tracking: one JSONL entry per finished chat turn."""

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from healthdesk.config import settings

logger = logging.getLogger(__name__)

LOG_DIR = Path(settings.log_dir)
LOG_FILE = LOG_DIR / "cost_log.jsonl"


@dataclass
class TurnCost:
    """Timing of a chat turn, from the start of its stream until the reply is stored.

    ``outcome`` is ``"finish"`` or ``"error"``.
    """

    chat_id: str
    stream_id: str
    model: str
    started: float = field(default_factory=time.monotonic)
    steps: int = 0
    outcome: str = "finish"

    def entry(self) -> dict:
        data = asdict(self)
        started = data.pop("started")
        data["timestamp"] = time.time()
        data["elapsed_seconds"] = round(time.monotonic() - started, 3)
        return data


def record_turn_cost(cost: TurnCost) -> None:
    """Append the turn's entry to the cost log. Write failures are logged only."""
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        with open(LOG_FILE, "a") as f:
            f.write(json.dumps(cost.entry()) + "\n")
    except OSError:
        logger.warning("Could not write cost log entry for chat %s", cost.chat_id)
