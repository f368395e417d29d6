"""
Tests para progreso agregado, slot de foco y validación de asignaciones.
"""
from app.domain.assignment import can_assign, can_assign_to_slot, find_compatible_slots
from app.domain.focus import get_next_focus_slot
from app.domain.progress import CaseProgress, aggregate_progress
from app.domain.slot import (
    AcceptableDocumentType,
    ResolvedSlot,
    SlotPriority,
    SlotProgress,
    SlotStatus,
    SlotTemplate,
)


def resolved(slot_id, status, priority=SlotPriority.REQUIRED, current=0, max_count=1, types=("passport",)):
    template = SlotTemplate(
        id=slot_id,
        name=slot_id,
        category_id="other",
        priority=priority,
        acceptable_types=tuple(AcceptableDocumentType(type_id=t, label=t) for t in types),
        max_count=max_count,
    )
    return ResolvedSlot(
        template=template,
        status=status,
        progress=SlotProgress(current=current, required=template.min_count),
    )


class TestProgress:
    def test_hidden_slots_not_counted(self):
        slots = [
            resolved("a", SlotStatus.SATISFIED),
            resolved("b", SlotStatus.EMPTY),
            resolved("c", SlotStatus.HIDDEN),
        ]
        assert aggregate_progress(slots) == CaseProgress(total=2, satisfied=1, required=2, required_satisfied=1)

    def test_conditional_and_optional_not_required(self):
        slots = [
            resolved("a", SlotStatus.SATISFIED, priority=SlotPriority.CONDITIONAL),
            resolved("b", SlotStatus.EMPTY, priority=SlotPriority.OPTIONAL),
            resolved("c", SlotStatus.SATISFIED),
        ]
        progress = aggregate_progress(slots)

        assert (progress.total, progress.satisfied) == (3, 2)
        assert (progress.required, progress.required_satisfied) == (1, 1)
        assert progress.is_submission_ready is True

    def test_empty_case(self):
        progress = aggregate_progress([])
        assert progress == CaseProgress()
        assert progress.completion_ratio == 0.0

    def test_completion_ratio(self):
        assert CaseProgress(total=4, satisfied=1).completion_ratio == 0.25


class TestFocus:
    """Tests para get_next_focus_slot()."""

    def test_required_issue_first(self):
        slots = [
            resolved("empty", SlotStatus.EMPTY),
            resolved("partial", SlotStatus.PARTIAL),
            resolved("issue", SlotStatus.ISSUE),
        ]
        assert get_next_focus_slot(slots).id == "issue"

    def test_empty_before_partial(self):
        slots = [resolved("partial", SlotStatus.PARTIAL), resolved("empty", SlotStatus.EMPTY)]
        assert get_next_focus_slot(slots).id == "empty"

    def test_catalog_order_breaks_ties(self):
        slots = [resolved("first", SlotStatus.EMPTY), resolved("second", SlotStatus.EMPTY)]
        assert get_next_focus_slot(slots).id == "first"

    def test_optional_issue_last(self):
        slots = [
            resolved("opt", SlotStatus.ISSUE, priority=SlotPriority.OPTIONAL),
            resolved("req", SlotStatus.PARTIAL),
        ]
        assert get_next_focus_slot(slots).id == "req"
        assert get_next_focus_slot(slots[:1]).id == "opt"

    def test_optional_empty_is_never_focus(self):
        """Test: slots opcionales vacíos o parciales no generan foco."""
        slots = [
            resolved("a", SlotStatus.EMPTY, priority=SlotPriority.OPTIONAL),
            resolved("b", SlotStatus.PARTIAL, priority=SlotPriority.CONDITIONAL),
            resolved("c", SlotStatus.SATISFIED),
        ]
        assert get_next_focus_slot(slots) is None

    def test_hidden_slots_ignored(self):
        slots = [resolved("a", SlotStatus.HIDDEN), resolved("b", SlotStatus.SATISFIED)]
        assert get_next_focus_slot(slots) is None


class TestAssignment:
    """Tests para can_assign() y find_compatible_slots()."""

    def test_accepted_type_with_capacity(self):
        assert can_assign(resolved("a", SlotStatus.EMPTY), "passport") is True

    def test_rejects_unknown_type(self):
        assert can_assign(resolved("a", SlotStatus.EMPTY), "bank_statement") is False

    def test_rejects_full_slot(self):
        assert can_assign(resolved("a", SlotStatus.SATISFIED, current=1), "passport") is False
        assert can_assign(resolved("a", SlotStatus.PARTIAL, current=1, max_count=2), "passport") is True

    def test_zero_capacity_slot(self):
        """Test: max_count=0 no acepta ningún documento (no se trata como 1)."""
        assert can_assign(resolved("a", SlotStatus.EMPTY, current=0, max_count=0), "passport") is False

    def test_rejects_hidden_slot(self):
        assert can_assign(resolved("a", SlotStatus.HIDDEN), "passport") is False

    def test_unknown_slot_id(self):
        slots = [resolved("a", SlotStatus.EMPTY)]
        assert can_assign_to_slot(slots, "passport", "missing") is False
        assert can_assign_to_slot(slots, "passport", "a") is True

    def test_compatible_slots(self):
        slots = [
            resolved("a", SlotStatus.EMPTY),
            resolved("b", SlotStatus.SATISFIED, current=1),
            resolved("c", SlotStatus.EMPTY, types=("passport", "national_id")),
            resolved("d", SlotStatus.HIDDEN),
        ]
        assert [s.id for s in find_compatible_slots("passport", slots)] == ["a", "c"]
