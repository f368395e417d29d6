"""
Tests del resolver de slots de evidencia.
Verifican precedencia de condiciones/dependencias, estados por documentos y
las propiedades del resultado (idempotencia, monotonicidad, orden).
"""
import pytest

from app.domain.case import CaseState, Document, DocumentStatus, QualityCheck
from app.domain.catalog import Catalog
from app.domain.form_values import StringValue
from app.domain.slot import (
    AcceptableDocumentType,
    DependencyCondition,
    FormCondition,
    SlotDependency,
    SlotPriority,
    SlotStatus,
    SlotTemplate,
)
from app.domain.slot_resolution import SlotResolver
from app.services.visa_catalogs import catalog_for

CASE_ID = "case-001"


def slot(slot_id, priority=SlotPriority.REQUIRED, min_count=1, max_count=1, types=("any_doc",), depends_on=None, form_condition=None):
    return SlotTemplate(
        id=slot_id,
        name=slot_id.replace("_", " ").title(),
        category_id="other",
        priority=priority,
        acceptable_types=tuple(AcceptableDocumentType(type_id=t, label=t) for t in types),
        min_count=min_count,
        max_count=max_count,
        depends_on=depends_on,
        form_condition=form_condition,
    )


def doc(doc_id, *slots, status=DocumentStatus.APPROVED, passed=True, doc_type="any_doc", quality=True):
    quality_check = QualityCheck(passed=passed, issues=() if passed else ("blurry",)) if quality else None
    return Document(
        id=doc_id,
        document_type_id=doc_type,
        status=status,
        quality_check=quality_check,
        assigned_to_slots=tuple(slots),
    )


def resolve(templates, documents=(), responses=None, strict=False):
    catalog = Catalog(visa_type="test", templates=tuple(templates)).for_case(CASE_ID)
    state = CaseState.build(CASE_ID, "test", documents=documents, responses=responses)
    return SlotResolver(strict_quality_check=strict).resolve(catalog, state)


def status_of(resolution, template_id):
    return resolution.get_slot_by_id(f"{CASE_ID}-{template_id}").status


@pytest.fixture
def example_catalog():
    return [
        slot("passport", types=("passport",)),
        slot("bank_statements", min_count=3, max_count=6, types=("bank_statement",)),
        slot(
            "marriage_certificate",
            types=("marriage_cert",),
            form_condition=FormCondition("maritalStatus", "equals", StringValue("married")),
        ),
    ]


class TestExampleScenario:
    """Escenario de referencia: pasaporte, extractos bancarios y certificado de matrimonio."""

    def test_initial_state(self, example_catalog):
        resolution = resolve(example_catalog, responses={"maritalStatus": "single"})

        assert status_of(resolution, "passport") == SlotStatus.EMPTY
        assert status_of(resolution, "bank_statements") == SlotStatus.EMPTY
        assert status_of(resolution, "marriage_certificate") == SlotStatus.HIDDEN

        progress = resolution.progress
        assert (progress.total, progress.satisfied, progress.required, progress.required_satisfied) == (2, 0, 2, 0)

    def test_after_approved_passport(self, example_catalog):
        documents = [doc("doc-1", "passport", doc_type="passport")]
        resolution = resolve(example_catalog, documents, responses={"maritalStatus": "single"})

        assert status_of(resolution, "passport") == SlotStatus.SATISFIED
        assert resolution.progress.required_satisfied == 1
        assert resolution.next_focus_slot().id == f"{CASE_ID}-bank_statements"

    def test_married_shows_certificate(self, example_catalog):
        resolution = resolve(example_catalog, responses={"maritalStatus": "married"})
        assert status_of(resolution, "marriage_certificate") == SlotStatus.EMPTY
        assert resolution.progress.total == 3


class TestDocumentStatuses:
    """Tests para el estado derivado de los documentos asignados."""

    def test_issue_outranks_approved(self):
        documents = [doc("d1", "a"), doc("d2", "a", passed=False)]
        resolution = resolve([slot("a", max_count=2)], documents)
        assert status_of(resolution, "a") == SlotStatus.ISSUE

    def test_partial_below_min_count(self):
        documents = [doc("d1", "a"), doc("d2", "a", status=DocumentStatus.PENDING)]
        resolution = resolve([slot("a", min_count=2, max_count=3)], documents)
        assert status_of(resolution, "a") == SlotStatus.PARTIAL

    def test_missing_quality_check_is_lenient_by_default(self):
        resolution = resolve([slot("a")], [doc("d1", "a", quality=False)])
        assert status_of(resolution, "a") == SlotStatus.SATISFIED

    def test_missing_quality_check_strict(self):
        resolution = resolve([slot("a")], [doc("d1", "a", quality=False)], strict=True)
        assert status_of(resolution, "a") == SlotStatus.ISSUE

    def test_monotonicity(self):
        """Test: al quitar un aprobado bajo min_count -> partial, y con cero -> empty."""
        templates = [slot("a", min_count=3, max_count=5)]
        documents = [doc("d1", "a"), doc("d2", "a"), doc("d3", "a")]

        assert status_of(resolve(templates, documents), "a") == SlotStatus.SATISFIED
        assert status_of(resolve(templates, documents[:2]), "a") == SlotStatus.PARTIAL
        assert status_of(resolve(templates, documents[:1]), "a") == SlotStatus.PARTIAL
        assert status_of(resolve(templates, []), "a") == SlotStatus.EMPTY

    def test_slot_progress(self):
        resolution = resolve([slot("a", min_count=3, max_count=5)], [doc("d1", "a"), doc("d2", "a")])
        resolved = resolution.get_slot_by_id(f"{CASE_ID}-a")

        assert (resolved.progress.current, resolved.progress.required) == (2, 3)
        assert resolved.satisfied_by_doc_ids == ("d1", "d2")

    def test_document_counted_once_per_slot(self):
        resolution = resolve([slot("a", min_count=2, max_count=3)], [doc("d1", "a", "a")])
        assert resolution.get_slot_by_id(f"{CASE_ID}-a").progress.current == 1

    def test_document_in_several_slots(self):
        resolution = resolve([slot("a"), slot("b")], [doc("d1", "a", "b")])
        assert status_of(resolution, "a") == SlotStatus.SATISFIED
        assert status_of(resolution, "b") == SlotStatus.SATISFIED

    def test_assignment_to_unknown_slot_is_ignored(self):
        resolution = resolve([slot("a")], [doc("d1", "ghost")])
        assert status_of(resolution, "a") == SlotStatus.EMPTY
        assert resolution.get_docs_for_slot(f"{CASE_ID}-ghost") == []

    def test_get_docs_for_slot(self):
        documents = [doc("d1", "a"), doc("d2", "b")]
        resolution = resolve([slot("a"), slot("b")], documents)
        assert [d.id for d in resolution.get_docs_for_slot(f"{CASE_ID}-a")] == ["d1"]


class TestDependencies:
    """Tests para dependencias entre slots."""

    def test_hidden_when_dependency_not_satisfied(self):
        """Test: B depende de A 'satisfied'; con A vacío, B oculto aunque tenga documentos."""
        templates = [slot("a"), slot("b", depends_on=SlotDependency("a", DependencyCondition.SATISFIED))]
        resolution = resolve(templates, [doc("d1", "b")])
        assert status_of(resolution, "b") == SlotStatus.HIDDEN

    def test_visible_when_dependency_satisfied(self):
        templates = [slot("a"), slot("b", depends_on=SlotDependency("a"))]
        resolution = resolve(templates, [doc("d1", "a")])
        assert status_of(resolution, "b") == SlotStatus.EMPTY

    def test_any_condition(self):
        """Test: condición 'any' sólo oculta si la dependencia está oculta."""
        gate = FormCondition("show_a", "equals", StringValue("yes"))
        templates = [
            slot("a", form_condition=gate),
            slot("b", depends_on=SlotDependency("a", DependencyCondition.ANY)),
        ]
        assert status_of(resolve(templates, responses={"show_a": "yes"}), "b") == SlotStatus.EMPTY
        assert status_of(resolve(templates, responses={"show_a": "no"}), "b") == SlotStatus.HIDDEN

    def test_dependent_declared_before_dependency(self):
        """Test: el orden de resolución no depende del orden del catálogo."""
        templates = [slot("b", depends_on=SlotDependency("a")), slot("a")]
        resolution = resolve(templates, [doc("d1", "a")])

        assert status_of(resolution, "b") == SlotStatus.EMPTY
        assert [s.id for s in resolution.slots] == [f"{CASE_ID}-b", f"{CASE_ID}-a"]

    def test_multi_hop_propagation(self):
        templates = [
            slot("c", depends_on=SlotDependency("b", DependencyCondition.ANY)),
            slot("b", depends_on=SlotDependency("a")),
            slot("a"),
        ]
        assert status_of(resolve(templates), "c") == SlotStatus.HIDDEN

        resolution = resolve(templates, [doc("d1", "a"), doc("d2", "c")])
        assert status_of(resolution, "b") == SlotStatus.EMPTY
        assert status_of(resolution, "c") == SlotStatus.SATISFIED

    def test_dangling_dependency_hides_slot(self):
        templates = [slot("a", depends_on=SlotDependency("ghost", DependencyCondition.ANY))]
        assert status_of(resolve(templates, [doc("d1", "a")]), "a") == SlotStatus.HIDDEN

    def test_form_condition_takes_precedence(self):
        templates = [
            slot("a"),
            slot(
                "b",
                depends_on=SlotDependency("a"),
                form_condition=FormCondition("q", "equals", StringValue("yes")),
            ),
        ]
        resolution = resolve(templates, [doc("d1", "a"), doc("d2", "b")], responses={"q": "no"})
        assert status_of(resolution, "b") == SlotStatus.HIDDEN

    def test_unknown_operator_hides_slot(self):
        templates = [slot("a", form_condition=FormCondition("q", "matches", StringValue("x")))]
        assert status_of(resolve(templates, responses={"q": "x"}), "a") == SlotStatus.HIDDEN


class TestResolutionProperties:
    def test_idempotent(self, example_catalog):
        documents = [doc("d1", "passport", doc_type="passport"), doc("d2", "bank_statements", passed=False)]
        first = resolve(example_catalog, documents, {"maritalStatus": "married"})
        second = resolve(example_catalog, documents, {"maritalStatus": "married"})

        assert first.slots == second.slots
        assert first.progress == second.progress

    def test_status_without_conditions_depends_only_on_documents(self):
        documents = [doc("d1", "a")]
        with_answers = resolve([slot("a")], documents, {"anything": True})
        without_answers = resolve([slot("a")], documents)
        assert with_answers.slots == without_answers.slots

    def test_visible_and_hidden_partition(self, example_catalog):
        resolution = resolve(example_catalog, responses={"maritalStatus": "single"})
        assert len(resolution.visible_slots) == 2
        assert [s.id for s in resolution.hidden_slots] == [f"{CASE_ID}-marriage_certificate"]

    def test_unclassified_docs(self):
        unclassified = Document(id="u1", is_unclassified=True)
        resolution = resolve([slot("a")], [unclassified, doc("d1", "a")])
        assert [d.id for d in resolution.unclassified_docs] == ["u1"]

    def test_grouped_by_category(self):
        resolution = resolve([slot("a"), slot("b")])
        assert list(resolution.grouped_by_category()) == ["other"]
        assert len(resolution.grouped_by_category()["other"]) == 2


class TestNaturalisationCatalog:
    """Tests de integración con el catálogo real de naturalisation."""

    def test_employer_reference_follows_employment_proof(self):
        catalog = catalog_for("naturalisation", CASE_ID)
        resolver = SlotResolver()

        empty = resolver.resolve(catalog, CaseState.build(CASE_ID, "naturalisation"))
        assert status_of(empty, "employer_reference") == SlotStatus.HIDDEN

        letter = doc("d1", "employment_proof", doc_type="employment_letter")
        with_letter = resolver.resolve(catalog, CaseState.build(CASE_ID, "naturalisation", [letter]))
        assert status_of(with_letter, "employment_proof") == SlotStatus.SATISFIED
        assert status_of(with_letter, "employer_reference") == SlotStatus.EMPTY

    def test_conditional_slots_follow_answers(self):
        catalog = catalog_for("naturalisation", CASE_ID)
        responses = {"has_children": True, "marital_status": "married", "has_overseas_assets": False}
        resolution = SlotResolver().resolve(catalog, CaseState.build(CASE_ID, "naturalisation", responses=responses))

        assert status_of(resolution, "child_documents") == SlotStatus.EMPTY
        assert status_of(resolution, "marriage_certificate") == SlotStatus.EMPTY
        assert status_of(resolution, "overseas_assets") == SlotStatus.HIDDEN
        # los condicionales visibles no cuentan como requeridos
        assert resolution.progress.required == 9
        assert resolution.progress.total == 12
