from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class TimerRecord:
    id: int
    name: str | None
    duration: str | None

    @classmethod
    def from_row(cls, row) -> "TimerRecord":
        # the on-disk column for duration is "timer"
        return cls(id=int(row["id"]), name=row["name"], duration=row["timer"])

    def to_dict(self) -> dict:
        return asdict(self)
