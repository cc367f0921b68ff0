"""ServiceResult formatting for the command line.

``--json`` prints the envelope as indented JSON. The human format is a
short Rich-rendered summary of the validation verdict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.text import Text

from ibanctl.output.console import create_console, get_output

if TYPE_CHECKING:
    from ibanctl.services.result import ServiceResult

_BANK_FIELDS = ("name", "zip", "city", "bic")


def group_iban(value: str) -> str:
    """Print format: groups of four characters."""
    compact = "".join(value.split()).upper()
    return " ".join(compact[i : i + 4] for i in range(0, len(compact), 4))


def _render_verdict(data: dict[str, Any]) -> list[Text]:
    valid = bool(data.get("valid"))
    head = Text()
    head.append("VALID" if valid else "INVALID", style="iban.valid" if valid else "iban.invalid")
    head.append("  ")
    head.append(group_iban(str(data.get("iban", ""))), style="iban.value")
    lines = [head]

    for message in data.get("messages") or []:
        lines.append(Text(f"  {message}", style="iban.message"))

    bank_data = data.get("bankData") or {}
    for key in _BANK_FIELDS:
        value = bank_data.get(key)
        if value:
            line = Text("  ")
            line.append(f"{key}: ", style="iban.key")
            line.append(str(value))
            lines.append(line)
    return lines


def format_result(
    result: ServiceResult, *, json_output: bool = False, no_color: bool = False
) -> str:
    """Format a ServiceResult for display."""
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console(no_color=no_color)
    if result.error is not None:
        console.print(Text(f"ERROR: {result.op} - {result.error.message}", style="iban.error"))
    else:
        for line in _render_verdict(result.data):
            console.print(line)
    for warning in result.warnings:
        console.print(Text(f"WARNING: {warning}", style="iban.message"))
    return get_output(console).rstrip("\n")
