from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.domain.assignment import can_assign_to_slot, find_compatible_slots
from app.domain.case import CaseState, Document
from app.domain.catalog import Catalog
from app.domain.conditions import evaluate
from app.domain.focus import get_next_focus_slot
from app.domain.progress import CaseProgress, aggregate_progress
from app.domain.slot import (
    DependencyCondition,
    ResolvedSlot,
    SlotProgress,
    SlotStatus,
    SlotTemplate,
    scoped_slot_id,
)
from app.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CaseResolution:
    """
    Resultado de una pasada de resolución para un caso.
    Vista derivada: se recalcula completa ante cualquier cambio de entrada.
    """
    case_id: str
    slots: Tuple[ResolvedSlot, ...]
    progress: CaseProgress
    docs_by_slot: Mapping[str, Tuple[Document, ...]]
    unclassified_docs: Tuple[Document, ...] = ()

    @property
    def visible_slots(self) -> List[ResolvedSlot]:
        return [s for s in self.slots if s.is_visible]

    @property
    def hidden_slots(self) -> List[ResolvedSlot]:
        return [s for s in self.slots if not s.is_visible]

    def get_docs_for_slot(self, slot_id: str) -> List[Document]:
        return list(self.docs_by_slot.get(slot_id, ()))

    def get_slot_by_id(self, slot_id: str) -> Optional[ResolvedSlot]:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def can_assign_to_slot(self, doc_type_id: str, slot_id: str) -> bool:
        return can_assign_to_slot(self.slots, doc_type_id, slot_id)

    def compatible_slots(self, doc_type_id: str) -> List[ResolvedSlot]:
        return find_compatible_slots(doc_type_id, self.slots)

    def next_focus_slot(self) -> Optional[ResolvedSlot]:
        return get_next_focus_slot(self.slots)

    def grouped_by_category(self) -> Dict[str, List[ResolvedSlot]]:
        grouped: Dict[str, List[ResolvedSlot]] = {}
        for slot in self.slots:
            grouped.setdefault(slot.template.category_id, []).append(slot)
        return grouped


class SlotResolver:
    """
    Calcula el estado de cada slot de un catálogo contra el snapshot de un caso.

    Precedencia por plantilla:
    1. Si tiene form_condition y no se cumple -> hidden.
    2. Si depende de otro slot (ya resuelto):
       - condición 'satisfied' y el otro no está satisfied -> hidden
       - condición 'any' y el otro está hidden -> hidden
       - dependencia inexistente -> hidden
    3. Según los documentos asignados:
       - ninguno -> empty
       - alguno con quality check fallido -> issue
       - aprobados >= min_count -> satisfied
       - en otro caso -> partial

    Las plantillas se procesan en el orden topológico del catálogo, así cada
    dependencia está resuelta antes que sus dependientes. El resultado se
    devuelve en el orden del catálogo.
    """

    def __init__(self, strict_quality_check: bool = False) -> None:
        """
        Args:
            strict_quality_check: Si es True, un documento sin quality check
                cuenta como problema. Por defecto se considera aprobado.
        """
        self.strict_quality_check = strict_quality_check

    def resolve(self, catalog: Catalog, state: CaseState) -> CaseResolution:
        """
        Resuelve todos los slots del catálogo (ya con ids de caso) para el snapshot.

        Args:
            catalog: Catálogo del caso, ids con formato '{case_id}-{template_id}'.
            state: Snapshot de documentos y respuestas del caso.

        Returns:
            CaseResolution con slots, progreso e índice de documentos.
        """
        logger.debug(
            "Resolving %d slots for case %s against %d documents",
            len(catalog),
            state.case_id,
            len(state.documents),
        )

        docs_by_slot = self._index_documents(catalog, state)

        statuses: Dict[str, SlotStatus] = {}
        for template in catalog.resolution_order:
            try:
                statuses[template.id] = self._resolve_status(
                    template,
                    docs_by_slot.get(template.id, ()),
                    statuses,
                    state,
                )
            except Exception as e:
                logger.error("Error resolving slot %s, marking hidden: %s", template.id, e)
                statuses[template.id] = SlotStatus.HIDDEN

        slots = tuple(
            self._build_slot(template, statuses[template.id], docs_by_slot.get(template.id, ()))
            for template in catalog.templates
        )

        for slot in slots:
            logger.debug("Slot %s (%s) -> %s", slot.id, slot.name, slot.status.value)

        progress = aggregate_progress(slots)
        logger.debug(
            "Case %s progress: %d/%d satisfied, %d/%d required",
            state.case_id,
            progress.satisfied,
            progress.total,
            progress.required_satisfied,
            progress.required,
        )

        return CaseResolution(
            case_id=state.case_id,
            slots=slots,
            progress=progress,
            docs_by_slot=docs_by_slot,
            unclassified_docs=tuple(d for d in state.documents if d.is_unclassified),
        )

    # ------------------------
    # Lógica principal por slot
    # ------------------------
    def _resolve_status(
        self,
        template: SlotTemplate,
        assigned_docs: Sequence[Document],
        statuses: Mapping[str, SlotStatus],
        state: CaseState,
    ) -> SlotStatus:
        if template.form_condition is not None:
            if not evaluate(template.form_condition, state.responses):
                return SlotStatus.HIDDEN

        dependency = template.depends_on
        if dependency is not None:
            target_status = statuses.get(dependency.slot_id)
            if target_status is None:
                return SlotStatus.HIDDEN
            if dependency.condition == DependencyCondition.SATISFIED and target_status != SlotStatus.SATISFIED:
                return SlotStatus.HIDDEN
            if dependency.condition == DependencyCondition.ANY and target_status == SlotStatus.HIDDEN:
                return SlotStatus.HIDDEN

        if not assigned_docs:
            return SlotStatus.EMPTY

        if any(not self._passes_quality(doc) for doc in assigned_docs):
            return SlotStatus.ISSUE

        approved = sum(1 for doc in assigned_docs if doc.is_approved)
        if approved >= template.min_count:
            return SlotStatus.SATISFIED

        return SlotStatus.PARTIAL

    def _passes_quality(self, doc: Document) -> bool:
        if doc.quality_check is None:
            return not self.strict_quality_check
        return bool(doc.quality_check.passed)

    def _build_slot(
        self,
        template: SlotTemplate,
        status: SlotStatus,
        assigned_docs: Sequence[Document],
    ) -> ResolvedSlot:
        return ResolvedSlot(
            template=template,
            status=status,
            satisfied_by_doc_ids=tuple(doc.id for doc in assigned_docs),
            progress=SlotProgress(current=len(assigned_docs), required=template.min_count),
        )

    # ------------------------
    # Índice de documentos
    # ------------------------
    def _index_documents(self, catalog: Catalog, state: CaseState) -> Dict[str, Tuple[Document, ...]]:
        """
        Agrupa documentos por slot. `assigned_to_slots` usa ids de plantilla,
        así que se prefijan con el case_id antes de compararlos.
        """
        index: Dict[str, List[Document]] = {template.id: [] for template in catalog.templates}

        for doc in state.documents:
            for template_slot_id in doc.assigned_to_slots or ():
                slot_id = scoped_slot_id(state.case_id, template_slot_id)
                bucket = index.get(slot_id)
                if bucket is None:
                    logger.debug("Document %s assigned to unknown slot %s", doc.id, slot_id)
                    continue
                if any(existing.id == doc.id for existing in bucket):
                    continue
                bucket.append(doc)

        return {slot_id: tuple(docs) for slot_id, docs in index.items()}
