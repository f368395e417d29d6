from typing import Sequence


class CatalogError(ValueError):
    """Error de configuración detectado al cargar un catálogo de slots."""


class DuplicateSlotError(CatalogError):
    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Duplicated slot id detected: {slot_id}")
        self.slot_id = slot_id


class CatalogCycleError(CatalogError):
    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class UnknownVisaTypeError(LookupError):
    def __init__(self, visa_type: str) -> None:
        super().__init__(f"Unknown visa type: {visa_type}")
        self.visa_type = visa_type
