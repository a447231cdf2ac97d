"""
Pytest fixtures for the issuance test suite.

Provides:
- A deterministic clock so history entries and draft notes have stable
  timestamps
- Raw server line factories shaped like ``fetch_request_details`` rows
- Ready-loaded MIF and MRF editors
"""

from datetime import datetime, timezone
from typing import Any

import pytest

from issuance_config.schema import ApiConfig, EditorConfig, IssuanceConfig, RoleRequirement
from issuance_kernel.domain.clock import DeterministicClock
from issuance_kernel.domain.lines import RequestKind
from issuance_services.editor import RequestLineEditor

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# =========================================================================
# Raw payload factories
# =========================================================================


def make_mif_row(
    component_id: str = "C-100",
    mpn: str = "MPN-100",
    initial: Any = 10,
    updated: Any = None,
    on_hand: Any = 50,
    basket_id: str = "B-1",
    **extra: Any,
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "component_id": component_id,
        "basket_id": basket_id,
        "mpn": mpn,
        "item_description": f"Component {component_id}",
        "part_no": f"P-{component_id}",
        "make": "Acme",
        "uom": "pcs",
        "location": "Rack A",
        "on_hand_quantity": on_hand,
        "initial_requested_qty": initial,
        "remark": "",
    }
    if updated is not None:
        row["updated_requested_qty"] = updated
    row.update(extra)
    return row


def make_mrf_row(
    component_id: str = "C-100",
    mpn: str = "MPN-100",
    initial: Any = 5,
    updated: Any = None,
    mrf_id: str = "MRF-1",
    **extra: Any,
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "component_id": component_id,
        "mrf_id": mrf_id,
        "mpn": mpn,
        "item_description": f"Component {component_id}",
        "initial_requestedqty": initial,
        "remark": "",
    }
    if updated is not None:
        row["updated_requestedqty"] = updated
    row.update(extra)
    return row


def make_config(**role_fields: tuple[str, ...]) -> IssuanceConfig:
    return IssuanceConfig(
        config_id="test",
        version=1,
        api=ApiConfig(base_url="http://erp.test/api"),
        editor=EditorConfig(business_timezone="UTC"),
        role_requirements=tuple(
            RoleRequirement(role=role, vendor_fields=fields)
            for role, fields in role_fields.items()
        ),
    )


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def mif_editor(clock) -> RequestLineEditor:
    editor = RequestLineEditor(
        RequestKind.MIF, user_name="asha", role="inventory_head", clock=clock,
    )
    editor.load([
        make_mif_row("C-100", "MPN-100", initial=10),
        make_mif_row("C-200", "MPN-200", initial=4, on_hand=3),
    ])
    return editor


@pytest.fixture
def mrf_editor(clock) -> RequestLineEditor:
    editor = RequestLineEditor(
        RequestKind.MRF, user_name="ravi", role="purchase_head", clock=clock,
    )
    editor.load([
        make_mrf_row("C-100", "MPN-100", initial=5),
        make_mrf_row("C-300", "MPN-300", initial=2),
    ])
    return editor
