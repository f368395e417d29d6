# app/api/schemas.py
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.domain.case import CaseState, Document, DocumentStatus, QualityCheck
from app.domain.catalog import EvidenceCategory
from app.domain.form_values import to_raw
from app.domain.progress import CaseProgress
from app.domain.slot import ResolvedSlot, SlotStatus, SlotTemplate

ResponseValue = Union[bool, float, int, str, List[str], None]


class QualityCheckIn(BaseModel):
    passed: bool = Field(..., description="Veredicto del control de calidad previo.")
    issues: List[str] = Field(default_factory=list, description="Problemas detectados.")


class DocumentIn(BaseModel):
    id: str = Field(..., description="ID del documento.")
    document_type_id: Optional[str] = Field(None, description="Tipo de documento (ej: 'passport').")
    status: DocumentStatus = Field(DocumentStatus.UPLOADED, description="Estado de revisión del documento.")
    quality_check: Optional[QualityCheckIn] = Field(
        None,
        description="Resultado del quality check; si falta se considera aprobado.",
    )
    assigned_to_slots: List[str] = Field(
        default_factory=list,
        description="IDs de plantilla (sin prefijo de caso) a los que está asignado.",
    )
    name: Optional[str] = Field(None, description="Nombre legible del documento.")
    is_unclassified: bool = Field(False, description="True si aún no se clasificó.")

    def to_domain(self) -> Document:
        quality_check = None
        if self.quality_check is not None:
            quality_check = QualityCheck(
                passed=self.quality_check.passed,
                issues=tuple(self.quality_check.issues),
            )
        return Document(
            id=self.id,
            document_type_id=self.document_type_id,
            status=self.status,
            quality_check=quality_check,
            assigned_to_slots=tuple(self.assigned_to_slots),
            name=self.name,
            is_unclassified=self.is_unclassified,
        )


class CaseSnapshotRequest(BaseModel):
    case_id: str = Field(..., description="ID del caso (prefijo de los ids de slot).")
    visa_type: Optional[str] = Field(
        None,
        description="Tipo de visa (naturalisation, skilled_worker, partner, visitor); usa el default si falta.",
    )
    documents: List[DocumentIn] = Field(default_factory=list, description="Documentos actuales del caso.")
    responses: Dict[str, Any] = Field(
        default_factory=dict,
        description="Respuestas del cuestionario: question_id -> bool | number | string | [string].",
    )

    def to_state(self, visa_type: str) -> CaseState:
        return CaseState.build(
            case_id=self.case_id,
            visa_type=visa_type,
            documents=[d.to_domain() for d in self.documents],
            responses=self.responses,
        )


class CanAssignRequest(CaseSnapshotRequest):
    doc_type_id: str = Field(..., description="Tipo de documento que se quiere asignar.")
    slot_id: str = Field(..., description="ID del slot destino, con prefijo de caso.")


class AcceptableTypeOut(BaseModel):
    type_id: str
    label: str
    requirements: List[str] = Field(default_factory=list)
    is_preferred: bool = False
    conditional_note: Optional[str] = None


class FormConditionOut(BaseModel):
    question_id: str
    operator: str
    value: ResponseValue = None


class DependencyOut(BaseModel):
    slot_id: str
    condition: str


class SlotTemplateOut(BaseModel):
    id: str
    name: str
    category_id: str
    priority: str
    description: Optional[str] = None
    min_count: int
    max_count: int
    acceptable_types: List[AcceptableTypeOut] = Field(default_factory=list)
    depends_on: Optional[DependencyOut] = None
    form_condition: Optional[FormConditionOut] = None

    @classmethod
    def from_domain(cls, template: SlotTemplate) -> "SlotTemplateOut":
        depends_on = None
        if template.depends_on is not None:
            depends_on = DependencyOut(
                slot_id=template.depends_on.slot_id,
                condition=template.depends_on.condition.value,
            )
        form_condition = None
        if template.form_condition is not None:
            form_condition = FormConditionOut(
                question_id=template.form_condition.question_id,
                operator=template.form_condition.operator,
                value=to_raw(template.form_condition.value),
            )
        return cls(
            id=template.id,
            name=template.name,
            category_id=template.category_id,
            priority=template.priority.value,
            description=template.description,
            min_count=template.min_count,
            max_count=template.max_count,
            acceptable_types=[
                AcceptableTypeOut(
                    type_id=t.type_id,
                    label=t.label,
                    requirements=list(t.requirements),
                    is_preferred=t.is_preferred,
                    conditional_note=t.conditional_note,
                )
                for t in template.acceptable_types
            ],
            depends_on=depends_on,
            form_condition=form_condition,
        )


class SlotProgressOut(BaseModel):
    current: int
    required: int


class ResolvedSlotOut(SlotTemplateOut):
    status: SlotStatus
    satisfied_by_doc_ids: List[str] = Field(default_factory=list)
    progress: SlotProgressOut

    @classmethod
    def from_resolved(cls, slot: ResolvedSlot) -> "ResolvedSlotOut":
        base = SlotTemplateOut.from_domain(slot.template)
        return cls(
            **base.model_dump(),
            status=slot.status,
            satisfied_by_doc_ids=list(slot.satisfied_by_doc_ids),
            progress=SlotProgressOut(current=slot.progress.current, required=slot.progress.required),
        )


class ProgressOut(BaseModel):
    total: int
    satisfied: int
    required: int
    required_satisfied: int
    is_submission_ready: bool
    completion_ratio: float

    @classmethod
    def from_domain(cls, progress: CaseProgress) -> "ProgressOut":
        return cls(
            total=progress.total,
            satisfied=progress.satisfied,
            required=progress.required,
            required_satisfied=progress.required_satisfied,
            is_submission_ready=progress.is_submission_ready,
            completion_ratio=progress.completion_ratio,
        )


class ResolutionResponse(BaseModel):
    case_id: str
    slots: List[ResolvedSlotOut]
    progress: ProgressOut
    next_focus_slot_id: Optional[str] = Field(None, description="Slot más urgente; null si todo está completo.")
    unclassified_doc_ids: List[str] = Field(default_factory=list)


class CanAssignResponse(BaseModel):
    allowed: bool
    compatible_slot_ids: List[str] = Field(default_factory=list)


class CategoryOut(BaseModel):
    id: str
    name: str
    description: str
    order: int

    @classmethod
    def from_domain(cls, category: EvidenceCategory) -> "CategoryOut":
        return cls(id=category.id, name=category.name, description=category.description, order=category.order)


class CatalogResponse(BaseModel):
    visa_type: str
    categories: List[CategoryOut]
    templates: List[SlotTemplateOut]
    form_questions: List[str] = Field(default_factory=list, description="Preguntas que controlan la visibilidad.")
