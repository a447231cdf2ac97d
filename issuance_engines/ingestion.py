"""
issuance_engines.ingestion -- Server payload to ``RequestLine`` normalization.

Responsibility:
    Map one raw line dict from ``fetch_request_details`` into a
    ``RequestLine``.  Field names drifted over the life of the backend
    (``initial_requested_qty`` vs ``initial_requestedqty``, ``vendor`` vs
    ``vendorName``), so every read goes through a small alias table.

Invariants enforced:
    - ``current_quantity`` is the updated quantity when the server has
      one, else the initial quantity.
    - ``edited_quantity`` is seeded from ``current_quantity``.
    - ``issued_quantity`` defaults to ``current_quantity``.
    - Never raises on malformed optional fields; they fall back to
      defaults.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from issuance_kernel.domain.lines import (
    NOT_AVAILABLE,
    Allocation,
    AllocationOption,
    CertificateChoice,
    RequestKind,
    RequestLine,
    VendorDetails,
)
from issuance_engines.notes import normalize_history, parse_timestamp
from issuance_engines.quantities import coerce_quantity, to_int

_ALIASES: dict[str, tuple[str, ...]] = {
    "description": ("item_description", "description"),
    "initial_quantity": (
        "initial_requested_qty",
        "initial_requestedqty",
        "initial_requested_quantity",
    ),
    "updated_quantity": (
        "updated_requested_qty",
        "updated_requestedqty",
        "updated_requested_quantity",
    ),
    "on_hand": ("on_hand_quantity", "on_hand_qty"),
    "vendor_name": ("vendor", "vendorName", "vendor_name"),
    "delivery_date": ("expected_deliverydate", "expected_delivery_date"),
}


def _first(raw: Mapping[str, Any], field: str) -> Any:
    for key in _ALIASES[field]:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _text(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    text = str(value).strip()
    return text or NOT_AVAILABLE


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def parse_date(value: Any) -> date | None:
    """Parse a calendar date from a date, datetime or ISO string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        stamp = parse_timestamp(value)
        if stamp is not None:
            return stamp.date()
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _decode_list(raw: Any) -> list[Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    return list(raw) if isinstance(raw, (list, tuple)) else []


def parse_allocations(raw: Any) -> list[Allocation]:
    """Parse ``mrr_allocations`` (list or JSON string) into allocations."""
    allocations: list[Allocation] = []
    for item in _decode_list(raw):
        if not isinstance(item, Mapping):
            continue
        allocations.append(Allocation(
            allocation_id=_text(item.get("mrr_no")),
            quantity=to_int(item.get("quantity")),
        ))
    return allocations


def parse_allocation_options(raw: Any) -> tuple[AllocationOption, ...]:
    """Parse ``mrr_options`` into the MRRs a line may draw from."""
    options: list[AllocationOption] = []
    for item in _decode_list(raw):
        if not isinstance(item, Mapping):
            continue
        options.append(AllocationOption(
            allocation_id=_text(item.get("mrr_no")),
            available_quantity=to_int(item.get("material_in_quantity")),
            source=_text(item.get("source")),
        ))
    return tuple(options)


def parse_vendor(raw: Mapping[str, Any]) -> VendorDetails | None:
    """Read the vendor sub-record, or None when no vendor field is present."""
    vendor_name = _optional_text(_first(raw, "vendor_name"))
    link = _optional_text(raw.get("vendor_link"))
    price = _decimal(raw.get("approx_price"))
    delivery = parse_date(_first(raw, "delivery_date"))
    certificate = CertificateChoice.from_raw(raw.get("certificate_desired"))
    if (
        vendor_name is None
        and link is None
        and price is None
        and delivery is None
        and certificate is CertificateChoice.UNSET
    ):
        return None
    return VendorDetails(
        vendor_name=vendor_name or "",
        vendor_link=link or "",
        approx_price=price,
        expected_delivery_date=delivery,
        certificate_desired=certificate,
    )


def normalize_line(raw: Mapping[str, Any], key: int, kind: RequestKind) -> RequestLine:
    """Normalize one raw server line into a ``RequestLine``.

    Args:
        raw: One element of the ``fetch_request_details`` response.
        key: 1-based position of the line within the request.
        kind: Whether the line belongs to a MIF or an MRF.
    """
    initial = to_int(_first(raw, "initial_quantity"))
    updated = coerce_quantity(_first(raw, "updated_quantity"))
    current = updated if updated is not None else initial
    line_ref_field = "basket_id" if kind is RequestKind.MIF else "mrf_id"

    return RequestLine(
        key=key,
        kind=kind,
        component_id=str(raw.get("component_id") or ""),
        line_ref=_optional_text(raw.get(line_ref_field)),
        description=_text(_first(raw, "description")),
        mpn=_text(raw.get("mpn")),
        part_no=_text(raw.get("part_no")),
        make=_text(raw.get("make")),
        uom=_text(raw.get("uom")),
        location=_text(raw.get("location")),
        on_hand_quantity=to_int(_first(raw, "on_hand")),
        initial_quantity=initial,
        current_quantity=current,
        edited_quantity=current,
        remark=str(raw.get("remark") or ""),
        issued_quantity=to_int(raw.get("issued_quantity"), default=current),
        selected_allocations=parse_allocations(raw.get("mrr_allocations")),
        available_allocations=parse_allocation_options(raw.get("mrr_options")),
        vendor=parse_vendor(raw) if kind is RequestKind.MRF else None,
        quantity_history=normalize_history(raw.get("quantity_change_history")),
    )
