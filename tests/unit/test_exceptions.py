"""Tests for the error code catalogue and error serialization."""

from ddlflow.common.exceptions import DDLFlowError, ErrorCode


class TestErrorCode:

    def test_codes_are_unique(self):
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_codes_match_their_category(self):
        prefixes = {
            "CONFIG": ("CONFIG_ERROR",),
            "VALIDATION": ("VALIDATION_ERROR", "INVALID_ARGUMENT", "DUPLICATE_OPERATION"),
            "COMPILATION": ("UNSUPPORTED_OPERATION", "UNMAPPED_TYPE"),
            "EXECUTION": ("EXECUTION_ERROR", "QUERY_EXECUTION_ERROR", "TRANSACTION_ERROR"),
            "MIGRATION": ("MIGRATION_FAILED", "DUPLICATE_VERSION", "VERSION_NOT_FOUND", "LEDGER_ERROR"),
            "PLATFORM": ("PLATFORM_ERROR", "PLATFORM_NOT_SUPPORTED"),
        }
        expected = {name for names in prefixes.values() for name in names}
        assert {code.name for code in ErrorCode} == expected

        for prefix, names in prefixes.items():
            for name in names:
                assert ErrorCode[name].value.startswith(f"{prefix}_")


class TestDDLFlowError:

    def test_str_and_dict(self):
        cause = ValueError("bad")
        error = DDLFlowError(
            "Ledger unavailable",
            error_code=ErrorCode.LEDGER_ERROR,
            details={"table": "schema_info"},
            cause=cause,
        )

        assert str(error) == "[MIGRATION_004] Ledger unavailable (caused by: ValueError: bad)"
        assert error.to_dict() == {
            "type": "DDLFlowError",
            "message": "Ledger unavailable",
            "error_code": "MIGRATION_004",
            "error_name": "LEDGER_ERROR",
            "details": {"table": "schema_info"},
        }
