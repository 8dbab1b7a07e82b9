"""Script output for compiled commands.

Instead of executing commands, callers can render them as a single script
file: every command ends with ``;`` and consecutive commands are separated
by a line holding the dialect's separator (``GO`` for SQL Server).
"""

from typing import Iterable, Optional

from ddlflow.protocols.dialect import SqlDialect


def terminate(command: str) -> str:
    """Append a statement terminator unless one is already present."""
    command = command.rstrip()
    return command if command.endswith(";") else command + ";"


def build_script(
    commands: Iterable[str],
    dialect: SqlDialect,
    header: Optional[str] = None,
) -> str:
    """Render commands as a multi-statement script.

    Args:
        commands: Compiled SQL commands in execution order
        dialect: Dialect providing the separator line
        header: Optional comment line placed above the first command

    Returns:
        Script text ending with a newline, or an empty string when there
        are no commands and no header
    """
    separator = dialect.statement_separator
    joiner = f"\n{separator}\n" if separator else "\n\n"

    body = joiner.join(terminate(command) for command in commands)
    lines = []
    if header:
        lines.append(f"-- {header}")
    if body:
        lines.append(body)
    return "\n".join(lines) + "\n" if lines else ""
