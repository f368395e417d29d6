from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from app.domain.errors import CatalogCycleError, DuplicateSlotError
from app.domain.slot import SlotTemplate
from app.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvidenceCategory:
    id: str
    name: str
    description: str = ""
    order: int = 99


@dataclass(frozen=True)
class Catalog:
    """
    Catálogo inmutable de plantillas de slot para un tipo de visa.

    Se valida al construirse:
    - ids de slot únicos
    - grafo de dependencias acíclico (se rechaza con CatalogCycleError)

    Las dependencias hacia slots inexistentes no se rechazan; se registran
    como warning y el resolver las trata como no satisfechas (slot oculto).
    """
    visa_type: str
    templates: Tuple[SlotTemplate, ...]
    # False en las copias de for_case: el catálogo base ya avisó al cargarse
    warn_dangling: bool = field(default=True, repr=False, compare=False)
    resolution_order: Tuple[SlotTemplate, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        templates = tuple(self.templates)
        object.__setattr__(self, "templates", templates)

        by_id: Dict[str, SlotTemplate] = {}
        for template in templates:
            if template.id in by_id:
                raise DuplicateSlotError(template.id)
            by_id[template.id] = template

        if self.warn_dangling:
            for template in templates:
                if template.depends_on and template.depends_on.slot_id not in by_id:
                    logger.warning(
                        "Slot '%s' depends on unknown slot '%s'; it will resolve as hidden",
                        template.id,
                        template.depends_on.slot_id,
                    )

        object.__setattr__(self, "resolution_order", tuple(order_by_dependencies(templates)))

    def __len__(self) -> int:
        return len(self.templates)

    def __iter__(self):
        return iter(self.templates)

    def get(self, slot_id: str) -> Optional[SlotTemplate]:
        for template in self.templates:
            if template.id == slot_id:
                return template
        return None

    def for_case(self, case_id: str) -> "Catalog":
        """Devuelve el catálogo con ids de caso ('{case_id}-{template_id}')."""
        return Catalog(
            visa_type=self.visa_type,
            templates=tuple(t.scoped(case_id) for t in self.templates),
            warn_dangling=False,
        )


def order_by_dependencies(templates: Iterable[SlotTemplate]) -> List[SlotTemplate]:
    """
    Orden topológico (DFS iterativo con conjunto 'visiting') de las plantillas.

    Cada plantilla aparece después del slot del que depende, sin importar la
    profundidad de la cadena (A -> B -> C). Entre plantillas independientes se
    conserva el orden del catálogo.

    Raises:
        CatalogCycleError: si existe un ciclo (incluye auto-dependencia).
    """
    templates = list(templates)
    by_id = {t.id: t for t in templates}
    ordered: List[SlotTemplate] = []
    done: set = set()

    for template in templates:
        # cada plantilla tiene a lo sumo una dependencia: el DFS es una cadena
        chain: List[SlotTemplate] = []
        visiting: Dict[str, int] = {}
        current: Optional[SlotTemplate] = template

        while current is not None and current.id not in done:
            if current.id in visiting:
                cycle = [t.id for t in chain[visiting[current.id]:]]
                raise CatalogCycleError(cycle + [current.id])

            visiting[current.id] = len(chain)
            chain.append(current)
            dependency = current.depends_on
            current = by_id.get(dependency.slot_id) if dependency is not None else None

        for visited in reversed(chain):
            done.add(visited.id)
            ordered.append(visited)

    return ordered
