"""
Evaluación de condiciones de formulario.

Funciones puras: nunca lanzan excepciones. Cualquier entrada mal formada
(operador desconocido, condición None, valor no soportado) se evalúa a False,
es decir, el slot queda oculto.
"""
from typing import Any, Iterable, List, Mapping, Optional

from app.domain.form_values import (
    FormValue,
    StringArrayValue,
    StringValue,
    to_form_value,
)
from app.domain.slot import FormCondition, SlotTemplate
from app.logger import get_logger

logger = get_logger(__name__)

EQUALS = "equals"
NOT_EQUALS = "not_equals"
CONTAINS = "contains"
EXISTS = "exists"


def evaluate(condition: Optional[FormCondition], responses: Optional[Mapping[str, Any]]) -> bool:
    """
    Evalúa una condición de formulario contra las respuestas del caso.

    Args:
        condition: Condición del slot (question_id, operator, value).
        responses: Respuestas del caso; acepta FormValue o valores crudos.

    Returns:
        True si la condición se cumple. Una pregunta sin responder se
        compara como "undefined": equals -> False, not_equals -> True.
    """
    try:
        if condition is None:
            return False

        response = _lookup(responses, condition.question_id)
        target = to_form_value(condition.value)
        operator = condition.operator

        if operator == EQUALS:
            return _equals(response, target)
        if operator == NOT_EQUALS:
            return not _equals(response, target)
        if operator == CONTAINS:
            return _contains(response, target)
        if operator == EXISTS:
            return _exists(response)

        logger.warning(
            "Unknown operator '%s' on question '%s', evaluating to False",
            operator,
            condition.question_id,
        )
        return False

    except Exception as e:
        logger.error("Malformed form condition %r: %s", condition, e)
        return False


def _lookup(responses: Optional[Mapping[str, Any]], question_id: str) -> Optional[FormValue]:
    if not responses:
        return None
    return to_form_value(responses.get(question_id))


def _equals(response: Optional[FormValue], target: Optional[FormValue]) -> bool:
    if response is None or target is None:
        return False
    return response.kind == target.kind and response.value == target.value


def _contains(response: Optional[FormValue], target: Optional[FormValue]) -> bool:
    if not isinstance(response, StringArrayValue):
        return False
    if not isinstance(target, StringValue):
        return False
    return target.value in response.value


def _exists(response: Optional[FormValue]) -> bool:
    if response is None:
        return False
    if isinstance(response, (StringValue, StringArrayValue)):
        return len(response.value) > 0
    return True


def is_question_answered(question_id: str, responses: Optional[Mapping[str, Any]]) -> bool:
    return _lookup(responses, question_id) is not None


def questions_for(templates: Iterable[SlotTemplate]) -> List[str]:
    """Preguntas únicas referenciadas por condiciones de formulario, en orden de catálogo."""
    questions: List[str] = []
    for template in templates:
        condition = template.form_condition
        if condition and condition.question_id and condition.question_id not in questions:
            questions.append(condition.question_id)
    return questions
