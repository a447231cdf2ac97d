"""
issuance_engines.vendor -- Vendor details checks for MRF lines.

Before an MRF goes to procurement, purchasing attaches a vendor, a link,
an approximate price and an expected delivery date.  Which fields a role
must fill in is configuration (``issuance_config``), not code.

Invariants enforced:
    - Delivery date is required and may not be in the past.
    - The certificate-of-conformance answer must be yes or no, never unset.
    - A vendor link, when given, must be an http(s) URL.
    - Purity: ``today`` is passed in by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from urllib.parse import urlparse

from issuance_kernel.domain.lines import CertificateChoice, VendorDetails


@dataclass(frozen=True)
class FieldError:
    """A problem with one vendor field."""

    field: str
    message: str


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _is_blank(vendor: VendorDetails, field: str) -> bool:
    value = getattr(vendor, field, None)
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_vendor_details(
    vendor: VendorDetails,
    today: date,
    required_fields: tuple[str, ...] = (),
) -> tuple[FieldError, ...]:
    """Return every field error in ``vendor``; empty when it may be saved.

    Args:
        vendor: The vendor record being saved.
        today: Current calendar date in the business time zone.
        required_fields: Extra ``VendorDetails`` attribute names the acting
            role must fill in.
    """
    errors: list[FieldError] = []

    if vendor.expected_delivery_date is None:
        errors.append(FieldError("expected_delivery_date", "Delivery date is required."))
    elif vendor.expected_delivery_date < today:
        errors.append(FieldError(
            "expected_delivery_date",
            "Delivery date must be today or in the future.",
        ))

    if vendor.certificate_desired is CertificateChoice.UNSET:
        errors.append(FieldError("certificate_desired", "Please select Yes or No for CoC."))

    if vendor.vendor_link and not _is_http_url(vendor.vendor_link):
        errors.append(FieldError("vendor_link", "Vendor link must be a valid http(s) URL."))

    if vendor.approx_price is not None and vendor.approx_price < 0:
        errors.append(FieldError("approx_price", "Approximate price cannot be negative."))

    reported = {e.field for e in errors}
    for field in required_fields:
        if field not in reported and _is_blank(vendor, field):
            errors.append(FieldError(field, f"{field.replace('_', ' ').capitalize()} is required."))

    return tuple(errors)
