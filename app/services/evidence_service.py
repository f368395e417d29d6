# app/services/evidence_service.py
from __future__ import annotations

from typing import Optional

from app.domain.case import CaseState
from app.domain.slot_resolution import CaseResolution, SlotResolver
from app.integrations.case_stores import (
    DocumentStore,
    FormResponseStore,
    InMemoryDocumentStore,
    InMemoryFormResponseStore,
)
from app.logger import get_logger
from app.services.visa_catalogs import catalog_for

logger = get_logger(__name__)


class EvidenceService:
    """
    Coordina catálogo, documentos y respuestas de un caso para producir su
    estado de evidencia. No guarda estado entre llamadas: cada resolución
    se calcula desde cero con un snapshot nuevo.
    """

    def __init__(
        self,
        document_store: Optional[DocumentStore] = None,
        response_store: Optional[FormResponseStore] = None,
        slot_resolver: Optional[SlotResolver] = None,
    ) -> None:
        self.document_store = document_store or InMemoryDocumentStore()
        self.response_store = response_store or InMemoryFormResponseStore()
        self.slot_resolver = slot_resolver or SlotResolver()

    def resolve_case(self, case_id: str, visa_type: str) -> CaseResolution:
        """Lee documentos y respuestas del caso desde los stores y lo resuelve."""
        state = CaseState.build(
            case_id=case_id,
            visa_type=visa_type,
            documents=self.document_store.documents_for(case_id),
            responses=self.response_store.responses_for(case_id),
        )
        return self.resolve_snapshot(state)

    def resolve_snapshot(self, state: CaseState) -> CaseResolution:
        """Resuelve un snapshot explícito del caso."""
        catalog = catalog_for(state.visa_type, state.case_id)
        resolution = self.slot_resolver.resolve(catalog, state)

        focus = resolution.next_focus_slot()
        if focus is None:
            logger.debug("Case %s: all clear", state.case_id)
        else:
            logger.debug("Case %s: next focus %s (%s)", state.case_id, focus.id, focus.status.value)

        return resolution
