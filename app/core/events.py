from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "STAGE_CHANGED",
    "PUZZLE_SOLVED",
    "FLOWER_COLLECTED",
    "FLOWER_BLOOMED",
    "QUESTION_REVEALED",
    "SECRET_UNLOCKED",
]


@dataclass(frozen=True, slots=True)
class CampaignEvent:
    type: EventType
    stage: str
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, stage: str, payload: dict[str, Any]) -> "CampaignEvent":
        return CampaignEvent(type=type, stage=stage, payload=payload, ts=datetime.now(timezone.utc))

    def as_message(self) -> dict[str, object]:
        """JSON-serializable form pushed to presentation clients."""

        return {"type": self.type, "stage": self.stage, "payload": self.payload, "ts": self.ts.isoformat()}
