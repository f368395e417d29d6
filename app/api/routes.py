# app/api/routes.py
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.schemas import (
    CanAssignRequest,
    CanAssignResponse,
    CaseSnapshotRequest,
    CatalogResponse,
    CategoryOut,
    ProgressOut,
    ResolutionResponse,
    ResolvedSlotOut,
    SlotTemplateOut,
)
from app.config.settings import Settings, get_settings
from app.domain.conditions import questions_for
from app.domain.errors import UnknownVisaTypeError
from app.domain.slot_resolution import CaseResolution, SlotResolver
from app.logger import get_logger
from app.services.evidence_service import EvidenceService
from app.services.visa_catalogs import categories_for, get_catalog

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/evidence", tags=["evidence"])


def get_evidence_service(settings: Settings = Depends(get_settings)) -> EvidenceService:
    """Dependency injection para EvidenceService según la configuración."""
    return EvidenceService(
        slot_resolver=SlotResolver(strict_quality_check=settings.strict_quality_check),
    )


@router.post("/resolve", response_model=ResolutionResponse)
async def resolve_case(
    request: CaseSnapshotRequest,
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
) -> ResolutionResponse:
    """
    Resuelve el estado de todos los slots de evidencia de un caso.

    El request trae el snapshot completo (documentos + respuestas); no se
    guarda nada entre llamadas.
    """
    try:
        visa_type = request.visa_type or settings.default_visa_type
        logger.info("Received resolve request case=%s visa=%s", request.case_id, visa_type)
        get_catalog(visa_type)
        resolution = service.resolve_snapshot(request.to_state(visa_type))
        return build_resolution_response(resolution)

    except UnknownVisaTypeError as e:
        logger.error("Unknown visa type in resolve request: %s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        logger.error("Validation error in resolve request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {str(e)}",
        )
    except Exception as e:
        logger.error("Unexpected error resolving case: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while resolving case",
        )


@router.post("/can-assign", response_model=CanAssignResponse)
async def can_assign(
    request: CanAssignRequest,
    service: EvidenceService = Depends(get_evidence_service),
    settings: Settings = Depends(get_settings),
) -> CanAssignResponse:
    """
    Indica si un tipo de documento puede asignarse a un slot.

    Se consulta antes de confirmar un drag & drop o un destino de upload; la
    asignación en sí la aplica quien llama.
    """
    try:
        visa_type = request.visa_type or settings.default_visa_type
        get_catalog(visa_type)
        resolution = service.resolve_snapshot(request.to_state(visa_type))
        allowed = resolution.can_assign_to_slot(request.doc_type_id, request.slot_id)
        logger.info(
            "can-assign case=%s type=%s slot=%s -> %s",
            request.case_id,
            request.doc_type_id,
            request.slot_id,
            allowed,
        )
        return CanAssignResponse(
            allowed=allowed,
            compatible_slot_ids=[s.id for s in resolution.compatible_slots(request.doc_type_id)],
        )

    except UnknownVisaTypeError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        logger.error("Validation error in can-assign request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {str(e)}",
        )
    except Exception as e:
        logger.error("Unexpected error in can-assign: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while checking assignment",
        )


@router.get("/catalogs/{visa_type}", response_model=CatalogResponse)
async def get_visa_catalog(visa_type: str) -> CatalogResponse:
    """Devuelve las plantillas de slot (ids de plantilla) y categorías de una visa."""
    try:
        catalog = get_catalog(visa_type)
    except UnknownVisaTypeError as e:
        logger.warning("Catalog requested for unknown visa type: %s", visa_type)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return CatalogResponse(
        visa_type=visa_type,
        categories=[CategoryOut.from_domain(c) for c in categories_for(visa_type)],
        templates=[SlotTemplateOut.from_domain(t) for t in catalog.templates],
        form_questions=questions_for(catalog.templates),
    )


def build_resolution_response(resolution: CaseResolution) -> ResolutionResponse:
    """Convierte un CaseResolution (dominio) al schema de respuesta."""
    focus = resolution.next_focus_slot()
    return ResolutionResponse(
        case_id=resolution.case_id,
        slots=[ResolvedSlotOut.from_resolved(s) for s in resolution.slots],
        progress=ProgressOut.from_domain(resolution.progress),
        next_focus_slot_id=focus.id if focus else None,
        unclassified_doc_ids=[d.id for d in resolution.unclassified_docs],
    )
