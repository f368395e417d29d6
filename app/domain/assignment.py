from typing import Iterable, List, Optional

from app.domain.slot import ResolvedSlot


def can_assign(slot: Optional[ResolvedSlot], doc_type_id: str) -> bool:
    """
    Verifica si un documento de tipo `doc_type_id` puede asignarse al slot.

    No modifica nada: quien llama aplica la asignación por su cuenta.
    """
    if slot is None or not slot.is_visible:
        return False

    if not slot.template.accepts(doc_type_id):
        return False

    if slot.progress.current >= slot.template.max_count:
        return False

    return True


def can_assign_to_slot(slots: Iterable[ResolvedSlot], doc_type_id: str, slot_id: str) -> bool:
    slot = next((s for s in slots if s.id == slot_id), None)
    return can_assign(slot, doc_type_id)


def find_compatible_slots(doc_type_id: str, slots: Iterable[ResolvedSlot]) -> List[ResolvedSlot]:
    """Todos los slots que aceptarían hoy un documento de este tipo."""
    return [s for s in slots if can_assign(s, doc_type_id)]
