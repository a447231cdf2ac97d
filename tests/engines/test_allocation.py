"""
Tests for MRR allocation bookkeeping.
"""

import pytest

from issuance_engines.allocation import (
    allocation_errors,
    find_option,
    remove_allocation,
    upsert_allocation,
)
from issuance_kernel.domain.lines import (
    Allocation,
    AllocationOption,
    RequestKind,
    RequestLine,
)


def make_line(issued: int = 10, selected: list[Allocation] | None = None) -> RequestLine:
    return RequestLine(
        key=1,
        kind=RequestKind.MIF,
        component_id="C-1",
        mpn="MPN-1",
        current_quantity=issued,
        edited_quantity=issued,
        issued_quantity=issued,
        selected_allocations=list(selected or []),
        available_allocations=(
            AllocationOption("MRR-1", 8),
            AllocationOption("MRR-2", 8),
        ),
    )


class TestUpsertAllocation:
    def test_adds_new_allocation(self):
        assert upsert_allocation(make_line(), "MRR-1", 4) == [Allocation("MRR-1", 4)]

    def test_updates_existing_allocation_case_insensitively(self):
        line = make_line(selected=[Allocation("MRR-1", 4)])
        assert upsert_allocation(line, " mrr-1 ", 6) == [Allocation("MRR-1", 6)]

    def test_unknown_mrr_rejected(self):
        assert upsert_allocation(make_line(), "MRR-9", 1) is None

    def test_over_allocation_rejected(self):
        line = make_line(issued=10, selected=[Allocation("MRR-1", 6)])
        assert upsert_allocation(line, "MRR-2", 5) is None
        assert upsert_allocation(line, "MRR-2", 4) == [
            Allocation("MRR-1", 6),
            Allocation("MRR-2", 4),
        ]

    @pytest.mark.parametrize("quantity", [-5, "abc", None, 2.5, True])
    def test_unusable_quantity_rejected(self, quantity):
        line = make_line(selected=[Allocation("MRR-1", 2)])
        assert upsert_allocation(line, "MRR-2", quantity) is None

    def test_quantity_capped_by_mrr_availability(self):
        line = make_line(issued=10, selected=[Allocation("MRR-1", 1)])
        assert upsert_allocation(line, "MRR-2", 9) is None
        assert upsert_allocation(line, "MRR-2", 8) == [
            Allocation("MRR-1", 1),
            Allocation("MRR-2", 8),
        ]

    def test_numeric_string_accepted(self):
        assert upsert_allocation(make_line(), "MRR-1", " 3 ") == [Allocation("MRR-1", 3)]

    def test_input_not_mutated(self):
        line = make_line(selected=[Allocation("MRR-1", 2)])
        upsert_allocation(line, "MRR-2", 3)
        assert line.selected_allocations == [Allocation("MRR-1", 2)]


class TestRemoveAllocation:
    def test_removes_matching(self):
        line = make_line(selected=[Allocation("MRR-1", 2), Allocation("MRR-2", 3)])
        assert remove_allocation(line, "mrr-1") == [Allocation("MRR-2", 3)]

    def test_find_option(self):
        assert find_option(make_line(), "MRR-2").available_quantity == 8
        assert find_option(make_line(), "nope") is None


class TestAllocationErrors:
    def test_no_allocations_is_fine(self):
        assert allocation_errors(make_line()) == ()

    def test_balanced_allocations_ok(self):
        line = make_line(issued=5, selected=[Allocation("MRR-1", 2), Allocation("MRR-2", 3)])
        assert allocation_errors(line) == ()

    def test_unbalanced_reported(self):
        line = make_line(issued=5, selected=[Allocation("MRR-1", 2)])
        (error,) = allocation_errors(line)
        assert "allocated 2 but issuing 5" in error

    def test_zero_quantity_and_blank_id_reported(self):
        line = make_line(issued=0, selected=[Allocation("", 0)])
        errors = allocation_errors(line)
        assert any("without an MRR number" in e for e in errors)
        assert any("positive quantity" in e for e in errors)
