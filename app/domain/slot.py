from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple

from app.domain.form_values import FormValue


class SlotPriority(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    CONDITIONAL = "conditional"


class SlotStatus(str, Enum):
    """
    Estado resuelto de un slot:
    - hidden: condición de formulario o dependencia no cumplida
    - empty: sin documentos
    - partial: hay documentos pero no alcanzan min_count aprobados
    - issue: algún documento tiene problemas de calidad
    - satisfied: min_count documentos aprobados y sin problemas
    """
    HIDDEN = "hidden"
    EMPTY = "empty"
    PARTIAL = "partial"
    ISSUE = "issue"
    SATISFIED = "satisfied"


class DependencyCondition(str, Enum):
    SATISFIED = "satisfied"
    ANY = "any"


@dataclass(frozen=True)
class AcceptableDocumentType:
    type_id: str
    label: str
    requirements: Tuple[str, ...] = ()
    is_preferred: bool = False
    description: Optional[str] = None
    conditional_note: Optional[str] = None


@dataclass(frozen=True)
class SlotDependency:
    slot_id: str
    condition: DependencyCondition = DependencyCondition.SATISFIED


@dataclass(frozen=True)
class FormCondition:
    question_id: str
    # str y no Enum: un operador desconocido debe poder representarse (y evaluarse a False)
    operator: str
    value: FormValue


@dataclass(frozen=True)
class SlotTemplate:
    id: str
    name: str
    category_id: str
    priority: SlotPriority
    acceptable_types: Tuple[AcceptableDocumentType, ...] = ()
    min_count: int = 1
    max_count: int = 1
    depends_on: Optional[SlotDependency] = None
    form_condition: Optional[FormCondition] = None
    description: Optional[str] = None

    def accepts(self, doc_type_id: Optional[str]) -> bool:
        return any(t.type_id == doc_type_id for t in self.acceptable_types)

    def scoped(self, case_id: str) -> "SlotTemplate":
        """Copia con ids de caso: '{case_id}-{template_id}' (también para la dependencia)."""
        depends_on = self.depends_on
        if depends_on is not None:
            depends_on = replace(depends_on, slot_id=scoped_slot_id(case_id, depends_on.slot_id))
        return replace(self, id=scoped_slot_id(case_id, self.id), depends_on=depends_on)


@dataclass(frozen=True)
class SlotProgress:
    current: int
    required: int


@dataclass(frozen=True)
class ResolvedSlot:
    """Vista derivada de un slot: plantilla + estado calculado. Nunca se persiste."""
    template: SlotTemplate
    status: SlotStatus
    satisfied_by_doc_ids: Tuple[str, ...] = field(default_factory=tuple)
    progress: SlotProgress = SlotProgress(current=0, required=1)

    @property
    def id(self) -> str:
        return self.template.id

    @property
    def name(self) -> str:
        return self.template.name

    @property
    def priority(self) -> SlotPriority:
        return self.template.priority

    @property
    def is_visible(self) -> bool:
        return self.status != SlotStatus.HIDDEN

    @property
    def is_required(self) -> bool:
        return self.template.priority == SlotPriority.REQUIRED


def scoped_slot_id(case_id: str, template_id: str) -> str:
    return f"{case_id}-{template_id}"
