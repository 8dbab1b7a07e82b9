"""Tests for dialects, script output and compiler construction."""

from typing import Optional

import pytest

from ddlflow.common.exceptions import DDLFlowError, ErrorCode
from ddlflow.constants.sql import SqlType
from ddlflow.protocols import SqlDialect
from ddlflow.query_builder import (
    BaseDialect,
    CompilerFactory,
    SqlServerDialect,
    build_script,
    get_compiler,
    get_dialect,
    register_dialect,
)
from ddlflow.query_builder.script import terminate


class AnsiDialect(BaseDialect):
    """Minimal double-quote dialect used to exercise the defaults."""

    name = "ansi"

    def render_type(self, data_type: SqlType, length=None, scale=None, precision=None) -> Optional[str]:
        return {SqlType.INT: "INTEGER"}.get(data_type)

    def auto_increment(self, seed=None, step=None) -> str:
        return "GENERATED BY DEFAULT AS IDENTITY"


class TestSqlServerDialect:

    @pytest.mark.parametrize(
        "data_type, length, scale, precision, expected",
        [
            (SqlType.GUID, None, None, None, "UNIQUEIDENTIFIER"),
            (SqlType.INT, None, None, None, "INT"),
            (SqlType.BOOLEAN, None, None, None, "BIT"),
            (SqlType.VARCHAR, 50, None, None, "VARCHAR(50)"),
            (SqlType.VARCHAR, None, None, None, "VARCHAR"),
            (SqlType.NVARCHAR_MAX, None, None, None, "NVARCHAR(MAX)"),
            (SqlType.DECIMAL, None, 18, 4, "DECIMAL(18, 4)"),
            (SqlType.DECIMAL, None, None, None, "DECIMAL"),
            (SqlType.CURRENCY, None, 19, 4, "MONEY(19, 4)"),
            (SqlType.TIMESPAN, None, None, None, "DATETIMEOFFSET"),
        ],
    )
    def test_render_type(self, dialect, data_type, length, scale, precision, expected):
        assert dialect.render_type(data_type, length, scale, precision) == expected

    def test_every_type_is_mapped(self, dialect):
        for data_type in SqlType:
            assert dialect.render_type(data_type) is not None, data_type

    def test_escaping_round_trips(self, dialect):
        for name in ("Users", "odd]name", "[x]", "a b"):
            escaped = dialect.escape_table_name(name)
            assert escaped.startswith("[") and escaped.endswith("]")
            assert dialect.unescape_identifier(escaped) == name

    def test_closing_bracket_is_doubled(self, dialect):
        assert dialect.escape_column_name("odd]name") == "[odd]]name]"

    def test_string_quoting(self, dialect):
        assert dialect.quote_string("it's") == "'it''s'"
        assert dialect.unquote_string("'it''s'") == "it's"

    def test_syntax_variants(self, dialect):
        assert dialect.statement_separator == "GO"
        assert dialect.auto_increment() == "IDENTITY(1, 1)"
        assert dialect.drop_index("[IX]", "[T]") == "DROP INDEX [IX] ON [T];"

    def test_satisfies_protocol(self, dialect):
        assert isinstance(dialect, SqlDialect)


class TestBaseDialectDefaults:

    def test_defaults(self):
        ansi = AnsiDialect()
        assert ansi.escape_table_name('we"ird') == '"we""ird"'
        assert ansi.unescape_identifier('"we""ird"') == 'we"ird'
        assert ansi.unescape_identifier("bare") == "bare"
        assert ansi.statement_separator == ""
        assert ansi.drop_index('"IX"', '"T"') == 'DROP INDEX "IX";'
        assert ansi.rename_column('"a"', '"b"') == 'ALTER "a" "b"'


class TestBuildScript:

    def test_sql_server_script_uses_go(self, dialect):
        script = build_script(["DROP TABLE [A];", "DROP TABLE [B]"], dialect)
        assert script == "DROP TABLE [A];\nGO\nDROP TABLE [B];\n"

    def test_blank_line_separator(self):
        script = build_script(["SELECT 1", "SELECT 2"], AnsiDialect())
        assert script == "SELECT 1;\n\nSELECT 2;\n"

    def test_header(self, dialect):
        script = build_script(["SELECT 1"], dialect, header="Migration 1: Init (up)")
        assert script == "-- Migration 1: Init (up)\nSELECT 1;\n"

    def test_empty(self, dialect):
        assert build_script([], dialect) == ""

    def test_terminate(self):
        assert terminate("SELECT 1  ") == "SELECT 1;"
        assert terminate("SELECT 1;") == "SELECT 1;"


class TestCompilerFactory:

    @pytest.fixture(autouse=True)
    def restore_registry(self):
        saved = dict(CompilerFactory._registry)
        yield
        CompilerFactory._registry = saved

    def test_default_dialect_from_settings(self):
        compiler = get_compiler()
        assert isinstance(compiler.dialect, SqlServerDialect)
        assert compiler.strict is False

    def test_settings_drive_strict_mode(self, monkeypatch):
        monkeypatch.setenv("DDLFLOW_STRICT_COMPILATION", "true")
        from ddlflow.settings import _reload_settings
        _reload_settings()
        assert get_compiler().strict is True
        assert get_compiler(strict=False).strict is False

    @pytest.mark.parametrize("name", ["mssql", "SqlServer", " tsql "])
    def test_aliases(self, name):
        assert isinstance(get_dialect(name), SqlServerDialect)

    def test_unknown_dialect(self):
        with pytest.raises(DDLFlowError) as exc_info:
            get_dialect("oracle")
        assert exc_info.value.error_code == ErrorCode.PLATFORM_NOT_SUPPORTED
        assert "mssql" in exc_info.value.details["available"]

    def test_register_dialect(self):
        register_dialect("ANSI", AnsiDialect)
        assert "ansi" in CompilerFactory.available()
        compiler = get_compiler("ansi")
        assert compiler.dialect_name == "ansi"
