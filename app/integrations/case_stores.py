# app/integrations/case_stores.py
"""
Adaptadores en memoria para los colaboradores del servicio de evidencia.
No persisten nada: sirven para pruebas y para alimentar el servicio
desde un snapshot ya cargado por otra capa.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from app.domain.case import Document
from app.logger import get_logger

logger = get_logger(__name__)


class DocumentStore(Protocol):
    def documents_for(self, case_id: str) -> List[Document]:
        ...


class FormResponseStore(Protocol):
    def responses_for(self, case_id: str) -> Mapping[str, Any]:
        ...


class InMemoryDocumentStore:
    def __init__(self, documents: Optional[Mapping[str, Iterable[Document]]] = None) -> None:
        self._documents: Dict[str, List[Document]] = {
            case_id: list(docs) for case_id, docs in (documents or {}).items()
        }

    def documents_for(self, case_id: str) -> List[Document]:
        return list(self._documents.get(case_id, []))

    def put(self, case_id: str, document: Document) -> None:
        """Agrega o reemplaza (por id) un documento del caso."""
        docs = [d for d in self._documents.get(case_id, []) if d.id != document.id]
        docs.append(document)
        self._documents[case_id] = docs
        logger.debug("Stored document %s for case %s", document.id, case_id)


class InMemoryFormResponseStore:
    def __init__(self, responses: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._responses: Dict[str, Dict[str, Any]] = {
            case_id: dict(values) for case_id, values in (responses or {}).items()
        }

    def responses_for(self, case_id: str) -> Dict[str, Any]:
        return dict(self._responses.get(case_id, {}))

    def answer(self, case_id: str, question_id: str, value: Any) -> None:
        self._responses.setdefault(case_id, {})[question_id] = value
