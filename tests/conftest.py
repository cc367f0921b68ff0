"""Shared pytest fixtures and test helpers for ibanctl tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from ibanctl.config.settings import IbanSettings
from ibanctl.domain.bank_codes import BankEntry
from ibanctl.infrastructure.bank_data import InMemoryBankStore

VALID_DE_IBAN = "DE89370400440532013000"
BAD_CHECKSUM_DE_IBAN = "DE89370400440532013001"
VALID_GB_IBAN = "GB82WEST12345698765432"
VALID_NL_IBAN = "NL91ABNA0417164300"
VALID_AT_IBAN = "AT611904300234573201"

COMMERZBANK = BankEntry(
    country="DE",
    bank_code="37040044",
    name="Commerzbank",
    zip="50447",
    city="Köln",
    bic="COBADEFFXXX",
)
ABN_AMRO = BankEntry(country="NL", bank_code="ABNA", name="ABN AMRO Bank", bic="ABNANL2A")


def bundesbank_line(
    bank_code: str,
    name: str,
    *,
    main_office: bool = True,
    zip_code: str = "",
    city: str = "",
    bic: str = "",
) -> str:
    """Render one record in the Bundesbank fixed-width layout."""
    return "".join(
        [
            bank_code.ljust(8),
            "1" if main_office else "2",
            name.ljust(58),
            zip_code.ljust(5),
            city.ljust(35),
            name[:27].ljust(27),
            "".ljust(5),
            bic.ljust(11),
            "00",
            "000001",
            "U",
            "0",
            "00000000",
        ]
    )


# Trimmed OeNB bank code export: preamble, German header, head office first.
OENB_AT_CSV = "\n".join(
    [
        '"Stichtag: 01.10.2026";;;',
        ";;;",
        '"Kennzeichen";"Identnummer";"Bankleitzahl";"Institutsart";"Bankenname";'
        '"Straße";"PLZ";"Ort";"SWIFT-Code"',
        '"Hauptanstalt";"7";"19043";"Aktienbank";"UniCredit Bank Austria AG";'
        '"Rothschildplatz 1";"1020";"Wien";"BKAUATWW"',
        '"Zweigstelle";"8";"19043";"Aktienbank";"UniCredit Filiale Graz";'
        '"Herrengasse 1";"8010";"Graz";"BKAUATWW"',
        '"Hauptanstalt";"9";"";"Aktienbank";"Ohne Bankleitzahl";"";"";"";""',
    ]
)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Commands reconfigure logging; restore the root logger afterwards."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    app_logger = logging.getLogger("ibanctl")
    app_level = app_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    app_logger.setLevel(app_level)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from any ibanctl.toml or IBANCTL_* env of the host."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IBANCTL_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> IbanSettings:
    return IbanSettings.from_cli(search_from=tmp_path)


@pytest.fixture
def bank_store() -> InMemoryBankStore:
    """Registry with Commerzbank (DE) and ABN AMRO (NL)."""
    store = InMemoryBankStore()
    store.add(COMMERZBANK)
    store.add(ABN_AMRO)
    return store


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Bank data directory with a Bundesbank file and an Austrian CSV."""
    directory = tmp_path / "data"
    directory.mkdir()
    lines = [
        bundesbank_line(
            "37040044", "Commerzbank", zip_code="50447", city="Köln", bic="COBADEFFXXX"
        ),
        bundesbank_line("37040044", "Commerzbank Filiale", main_office=False, city="Bonn"),
    ]
    (directory / "bundesbank.txt").write_text("\n".join(lines) + "\n", encoding="iso-8859-1")
    (directory / "at.csv").write_text(
        "bank_code,name,zip,city,bic\n19043,Bank Austria,1010,Wien,BKAUATWW\n",
        encoding="utf-8",
    )
    return directory
