from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from app.domain.form_values import FormResponses, to_form_responses


class DocumentStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class QualityCheck:
    passed: bool
    issues: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Document:
    id: str
    document_type_id: Optional[str] = None
    status: DocumentStatus = DocumentStatus.UPLOADED
    quality_check: Optional[QualityCheck] = None
    # ids de plantilla ('identity'), no ids de caso ('case-001-identity')
    assigned_to_slots: Tuple[str, ...] = ()
    name: Optional[str] = None
    is_unclassified: bool = False

    @property
    def is_approved(self) -> bool:
        return self.status == DocumentStatus.APPROVED


@dataclass(frozen=True)
class CaseState:
    """
    Snapshot inmutable de un caso en un momento dado.
    Es la única entrada del resolver junto con el catálogo.
    """
    case_id: str
    visa_type: str
    documents: Tuple[Document, ...] = ()
    responses: FormResponses = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        case_id: str,
        visa_type: str,
        documents: Sequence[Document] = (),
        responses: Optional[Mapping[str, Any]] = None,
    ) -> "CaseState":
        """Construye el snapshot normalizando respuestas crudas a FormValue."""
        return cls(
            case_id=case_id,
            visa_type=visa_type,
            documents=tuple(documents),
            responses=to_form_responses(responses),
        )
