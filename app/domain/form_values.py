"""
Valores tipados para las respuestas del cuestionario de intake.

Cada respuesta se representa con un tipo explícito (bool, string, number o
lista de strings) para que las comparaciones de las condiciones de formulario
se hagan por tipo y nunca por coerción implícita (True != 1, "1" != 1).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from app.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BoolValue:
    value: bool
    kind: str = field(default="bool", init=False)


@dataclass(frozen=True)
class StringValue:
    value: str
    kind: str = field(default="string", init=False)


@dataclass(frozen=True)
class NumberValue:
    value: float
    kind: str = field(default="number", init=False)


@dataclass(frozen=True)
class StringArrayValue:
    value: Tuple[str, ...]
    kind: str = field(default="stringArray", init=False)


FormValue = Union[BoolValue, StringValue, NumberValue, StringArrayValue]
FormResponses = Mapping[str, FormValue]

_FORM_VALUE_TYPES = (BoolValue, StringValue, NumberValue, StringArrayValue)


def to_form_value(raw: Any) -> Optional[FormValue]:
    """
    Convierte un valor crudo (JSON / Python) a su FormValue.

    Devuelve None para valores no soportados (None, dicts, listas mixtas...),
    que se tratan igual que una pregunta sin responder.
    """
    if isinstance(raw, _FORM_VALUE_TYPES):
        return raw
    # bool antes que int: en Python bool es subclase de int
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, (int, float)):
        return NumberValue(float(raw))
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, (list, tuple)) and all(isinstance(item, str) for item in raw):
        return StringArrayValue(tuple(raw))
    return None


def to_form_responses(raw: Optional[Mapping[str, Any]]) -> Dict[str, FormValue]:
    """Normaliza un dict de respuestas crudas descartando las no soportadas."""
    responses: Dict[str, FormValue] = {}
    for question_id, raw_value in (raw or {}).items():
        value = to_form_value(raw_value)
        if value is None:
            if raw_value is not None:
                logger.debug(
                    "Ignoring unsupported response for question '%s': %r",
                    question_id,
                    raw_value,
                )
            continue
        responses[question_id] = value
    return responses


def to_raw(value: Optional[FormValue]) -> Any:
    """Inversa de to_form_value, útil para serializar respuestas."""
    if value is None:
        return None
    if isinstance(value, StringArrayValue):
        return list(value.value)
    if isinstance(value, NumberValue) and value.value.is_integer():
        return int(value.value)
    return value.value
