# examples/custom_catalog_example.py
"""
Ejemplos de cómo definir catálogos personalizados y resolver un caso contra ellos.
"""
from app.domain.case import CaseState, Document, DocumentStatus, QualityCheck
from app.domain.catalog import Catalog
from app.domain.form_values import StringValue
from app.domain.slot import (
    AcceptableDocumentType,
    DependencyCondition,
    FormCondition,
    SlotDependency,
    SlotPriority,
    SlotTemplate,
)
from app.domain.slot_resolution import SlotResolver


# =========================================
# EJEMPLO 1: Catálogo simple (3 slots)
# =========================================

def create_simple_catalog() -> Catalog:
    """
    Catálogo con tres slots:
    1. Passport (requerido)
    2. Bank Statements (requerido, mínimo 3)
    3. Marriage Certificate (sólo si marital_status == 'married')
    """
    return Catalog(
        visa_type="simple",
        templates=(
            SlotTemplate(
                id="passport",
                name="Passport",
                category_id="identity_personal",
                priority=SlotPriority.REQUIRED,
                acceptable_types=(AcceptableDocumentType("passport", "Current Passport", is_preferred=True),),
            ),
            SlotTemplate(
                id="bank_statements",
                name="Bank Statements",
                category_id="financial",
                priority=SlotPriority.REQUIRED,
                min_count=3,
                max_count=6,
                acceptable_types=(AcceptableDocumentType("bank_statement", "Bank Statement"),),
            ),
            SlotTemplate(
                id="marriage_certificate",
                name="Marriage Certificate",
                category_id="relationship",
                priority=SlotPriority.CONDITIONAL,
                acceptable_types=(AcceptableDocumentType("marriage_cert", "Marriage Certificate"),),
                form_condition=FormCondition("marital_status", "equals", StringValue("married")),
            ),
        ),
    )


# =========================================
# EJEMPLO 2: Cadena de dependencias
# =========================================

def create_dependency_catalog() -> Catalog:
    """
    La referencia del empleador sólo aparece cuando la prueba de empleo
    está satisfecha; la carta de traducción aparece si la referencia es visible.
    """
    return Catalog(
        visa_type="chained",
        templates=(
            SlotTemplate(
                id="translation",
                name="Reference Translation",
                category_id="translations",
                priority=SlotPriority.OPTIONAL,
                depends_on=SlotDependency("employer_reference", DependencyCondition.ANY),
            ),
            SlotTemplate(
                id="employer_reference",
                name="Employer Reference",
                category_id="employment",
                priority=SlotPriority.CONDITIONAL,
                depends_on=SlotDependency("employment_proof", DependencyCondition.SATISFIED),
            ),
            SlotTemplate(
                id="employment_proof",
                name="Employment Evidence",
                category_id="employment",
                priority=SlotPriority.REQUIRED,
                acceptable_types=(AcceptableDocumentType("employment_letter", "Employment Letter"),),
            ),
        ),
    )


if __name__ == "__main__":
    case_id = "case-demo"
    resolver = SlotResolver()

    catalog = create_simple_catalog().for_case(case_id)
    state = CaseState.build(
        case_id,
        "simple",
        documents=[
            Document(
                id="doc-1",
                document_type_id="passport",
                status=DocumentStatus.APPROVED,
                quality_check=QualityCheck(passed=True),
                assigned_to_slots=("passport",),
            ),
        ],
        responses={"marital_status": "single"},
    )
    resolution = resolver.resolve(catalog, state)

    print("Catálogo simple:")
    for slot in resolution.slots:
        print(f"  {slot.id}: {slot.status.value}")
    focus = resolution.next_focus_slot()
    print(f"  foco: {focus.id if focus else '-'}")

    chained = create_dependency_catalog().for_case(case_id)
    print("\nOrden de resolución:", [t.id for t in chained.resolution_order])
