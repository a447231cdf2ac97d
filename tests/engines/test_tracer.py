"""
Tests for the engine tracer decorator.
"""

import logging

from issuance_engines.preview import compute_preview
from issuance_engines.tracer import compute_input_fingerprint, traced_engine
from issuance_kernel.domain.lines import RequestKind, RequestLine


class TestComputeInputFingerprint:
    def test_deterministic(self):
        args = {"lines": [1, 2], "other": {"b": 1, "a": 2}}
        first = compute_input_fingerprint(("lines", "other"), args)
        assert first == compute_input_fingerprint(("lines", "other"), dict(args))
        assert len(first) == 16

    def test_dict_key_order_irrelevant(self):
        a = compute_input_fingerprint(("x",), {"x": {"a": 1, "b": 2}})
        b = compute_input_fingerprint(("x",), {"x": {"b": 2, "a": 1}})
        assert a == b

    def test_missing_field_is_null(self):
        assert compute_input_fingerprint(("x",), {}) == compute_input_fingerprint(
            ("x",), {"x": None}
        )


class TestTracedEngine:
    def test_emits_trace_at_debug(self, caplog):
        @traced_engine("sample", "2.0", fingerprint_fields=("value",))
        def double(value: int) -> int:
            return value * 2

        with caplog.at_level(logging.DEBUG, logger="issuance_kernel.engines.tracer"):
            assert double(4) == 8

        (record,) = [r for r in caplog.records if r.getMessage() == "ISSUANCE_ENGINE_TRACE"]
        assert record.engine_name == "sample"
        assert record.engine_version == "2.0"
        assert record.input_fingerprint

    def test_dataclass_inputs_traced(self, caplog):
        line = RequestLine(
            key=1, kind=RequestKind.MIF, component_id="C-1",
            current_quantity=3, edited_quantity=2,
        )
        with caplog.at_level(logging.DEBUG, logger="issuance_kernel.engines.tracer"):
            assert len(compute_preview([line])) == 1
        assert any(r.engine_name == "preview" for r in caplog.records
                   if r.getMessage() == "ISSUANCE_ENGINE_TRACE")
