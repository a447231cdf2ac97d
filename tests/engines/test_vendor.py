"""
Tests for vendor details checks on MRF lines.
"""

from datetime import date
from decimal import Decimal

from issuance_engines.vendor import validate_vendor_details
from issuance_kernel.domain.lines import CertificateChoice, VendorDetails

TODAY = date(2024, 1, 10)


def make_vendor(**overrides) -> VendorDetails:
    fields = {
        "vendor_name": "Mouser",
        "vendor_link": "https://mouser.example/p/1",
        "approx_price": Decimal("10.00"),
        "expected_delivery_date": date(2024, 1, 20),
        "certificate_desired": CertificateChoice.NO,
    }
    fields.update(overrides)
    return VendorDetails(**fields)


def error_fields(errors) -> set[str]:
    return {e.field for e in errors}


class TestValidateVendorDetails:
    def test_complete_vendor_passes(self):
        assert validate_vendor_details(make_vendor(), TODAY) == ()

    def test_delivery_today_is_allowed(self):
        assert validate_vendor_details(make_vendor(expected_delivery_date=TODAY), TODAY) == ()

    def test_delivery_in_past_rejected(self):
        errors = validate_vendor_details(
            make_vendor(expected_delivery_date=date(2024, 1, 9)), TODAY,
        )
        assert error_fields(errors) == {"expected_delivery_date"}

    def test_delivery_date_required(self):
        errors = validate_vendor_details(make_vendor(expected_delivery_date=None), TODAY)
        assert errors[0].message == "Delivery date is required."

    def test_certificate_must_be_answered(self):
        errors = validate_vendor_details(
            make_vendor(certificate_desired=CertificateChoice.UNSET), TODAY,
        )
        assert error_fields(errors) == {"certificate_desired"}

    def test_link_must_be_http(self):
        errors = validate_vendor_details(make_vendor(vendor_link="ftp://x/y"), TODAY)
        assert error_fields(errors) == {"vendor_link"}

    def test_negative_price_rejected(self):
        errors = validate_vendor_details(make_vendor(approx_price=Decimal("-1")), TODAY)
        assert error_fields(errors) == {"approx_price"}

    def test_role_required_fields(self):
        vendor = make_vendor(vendor_name="  ", vendor_link="", approx_price=None)
        assert validate_vendor_details(vendor, TODAY) == ()
        errors = validate_vendor_details(
            vendor, TODAY, ("vendor_name", "vendor_link", "approx_price"),
        )
        assert error_fields(errors) == {"vendor_name", "vendor_link", "approx_price"}
        assert errors[0].message == "Vendor name is required."
