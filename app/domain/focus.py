from typing import Callable, List, Optional, Sequence

from app.domain.slot import ResolvedSlot, SlotStatus

# Orden estricto de urgencia. Dentro de cada nivel gana el orden del catálogo.
FOCUS_TIERS: List[Callable[[ResolvedSlot], bool]] = [
    lambda s: s.status == SlotStatus.ISSUE and s.is_required,
    lambda s: s.status == SlotStatus.EMPTY and s.is_required,
    lambda s: s.status == SlotStatus.PARTIAL and s.is_required,
    lambda s: s.status == SlotStatus.ISSUE and not s.is_required,
]


def get_next_focus_slot(slots: Sequence[ResolvedSlot]) -> Optional[ResolvedSlot]:
    """
    Devuelve el slot visible más urgente, o None si no queda nada pendiente.

    Prioridad: issue requerido > vacío requerido > parcial requerido > issue opcional.
    """
    visible = [s for s in slots if s.is_visible]

    for matches in FOCUS_TIERS:
        for slot in visible:
            if matches(slot):
                return slot

    return None
