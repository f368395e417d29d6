from dataclasses import dataclass
from typing import Iterable

from app.domain.slot import ResolvedSlot, SlotStatus


@dataclass(frozen=True)
class CaseProgress:
    """
    Métricas agregadas sobre los slots visibles (status != hidden).

    Los slots con prioridad 'conditional' no cuentan como 'required'
    aunque estén visibles.
    """
    total: int = 0
    satisfied: int = 0
    required: int = 0
    required_satisfied: int = 0

    @property
    def is_submission_ready(self) -> bool:
        return self.required_satisfied == self.required

    @property
    def completion_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.satisfied / self.total


def aggregate_progress(slots: Iterable[ResolvedSlot]) -> CaseProgress:
    visible = [s for s in slots if s.is_visible]
    required = [s for s in visible if s.is_required]

    return CaseProgress(
        total=len(visible),
        satisfied=sum(1 for s in visible if s.status == SlotStatus.SATISFIED),
        required=len(required),
        required_satisfied=sum(1 for s in required if s.status == SlotStatus.SATISFIED),
    )
