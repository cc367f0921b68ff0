"""Bank registry file loaders.

Three formats are supported:

- ``bundesbank.txt``: the Deutsche Bundesbank fixed-width bank code file
  (ISO-8859-1, one record per line).
- ``at.csv`` as published by the Oesterreichische Nationalbank: semicolon
  separated, a few lines of preamble, then a German header row with
  ``Bankleitzahl``, ``Bankenname``, ``PLZ``, ``Ort`` and ``SWIFT-Code``.
- ``<cc>.csv``: a generic per-country CSV with a header row containing
  ``bank_code`` and ``name`` plus optional ``zip``, ``city``, ``bic``.
  The country code is taken from the file name.

Missing files are skipped. Malformed records are skipped and counted.
:func:`load_data_dir` skips a whole file it cannot read and carries on,
since the registry only enriches results.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ibanctl.domain.bank_codes import BankEntry
from ibanctl.errors import BankDataError
from ibanctl.infrastructure.bank_data import InMemoryBankStore

logger = logging.getLogger(__name__)

BUNDESBANK_FILENAME = "bundesbank.txt"

# Zero-based slices of the Bundesbank record layout.
_BB_BANK_CODE = slice(0, 8)
_BB_MAIN_OFFICE = slice(8, 9)
_BB_NAME = slice(9, 67)
_BB_ZIP = slice(67, 72)
_BB_CITY = slice(72, 107)
_BB_BIC = slice(139, 150)
_BB_MIN_RECORD = 150

_CSV_REQUIRED = frozenset({"bank_code", "name"})

# OeNB column names for the BankEntry fields.
_OENB_MARKER = "Bankleitzahl"
_OENB_COLUMNS = {
    "bank_code": "Bankleitzahl",
    "name": "Bankenname",
    "zip": "PLZ",
    "city": "Ort",
    "bic": "SWIFT-Code",
}
_SNIFF_BYTES = 4096


@dataclass(frozen=True)
class LoadReport:
    """Outcome of loading one file.

    ``error`` is set when the file was skipped as a whole.
    """

    path: Path
    loaded: int = 0
    skipped: int = 0
    error: str | None = None


def load_bundesbank_data(path: Path, store: InMemoryBankStore) -> LoadReport:
    """Load head-office records from a Bundesbank bank code file."""
    try:
        lines = path.read_text(encoding="iso-8859-1").splitlines()
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise BankDataError(msg) from exc

    loaded = skipped = 0
    for line in lines:
        if not line.strip():
            continue
        bank_code = line[_BB_BANK_CODE]
        if len(line) < _BB_MIN_RECORD or not bank_code.isdigit():
            skipped += 1
            continue
        if line[_BB_MAIN_OFFICE] != "1":
            continue
        entry = BankEntry(
            country="DE",
            bank_code=bank_code,
            name=line[_BB_NAME].strip(),
            zip=line[_BB_ZIP].strip(),
            city=line[_BB_CITY].strip(),
            bic=line[_BB_BIC].strip(),
        )
        if store.add(entry):
            loaded += 1
    return LoadReport(path=path, loaded=loaded, skipped=skipped)


def load_csv_data(path: Path, store: InMemoryBankStore) -> LoadReport:
    """Load a generic ``<cc>.csv`` registry file."""
    country = path.stem.upper()
    if len(country) != 2 or not country.isalpha():
        msg = f"Cannot derive a country code from {path.name}"
        raise BankDataError(msg)

    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            missing = _CSV_REQUIRED - set(reader.fieldnames or ())
            if missing:
                msg = f"{path.name} is missing columns: {', '.join(sorted(missing))}"
                raise BankDataError(msg)

            loaded = skipped = 0
            for row in reader:
                bank_code = (row.get("bank_code") or "").strip()
                name = (row.get("name") or "").strip()
                if not bank_code or not name:
                    skipped += 1
                    continue
                entry = BankEntry(
                    country=country,
                    bank_code=bank_code,
                    name=name,
                    zip=(row.get("zip") or "").strip(),
                    city=(row.get("city") or "").strip(),
                    bic=(row.get("bic") or "").strip(),
                )
                if store.add(entry):
                    loaded += 1
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise BankDataError(msg) from exc
    return LoadReport(path=path, loaded=loaded, skipped=skipped)


def _decode(raw: bytes) -> str:
    # OeNB exports have shipped both as UTF-8 and as Windows Latin-1.
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("iso-8859-1")


def is_oenb_file(path: Path) -> bool:
    """Whether *path* looks like the OeNB bank code export."""
    try:
        with path.open("rb") as handle:
            head = handle.read(_SNIFF_BYTES)
    except OSError:
        return False
    return _OENB_MARKER.encode("ascii") in head


def _is_oenb_header(line: str) -> bool:
    return _OENB_MARKER in (cell.strip().strip('"') for cell in line.split(";"))


def load_austria_data(path: Path, store: InMemoryBankStore) -> LoadReport:
    """Load the OeNB bank code export (``at.csv``)."""
    try:
        text = _decode(path.read_bytes())
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise BankDataError(msg) from exc

    lines = text.splitlines()
    header_at = next((i for i, line in enumerate(lines) if _is_oenb_header(line)), None)
    if header_at is None:
        msg = f"{path.name} has no {_OENB_MARKER} header row"
        raise BankDataError(msg)

    try:
        reader = csv.DictReader(io.StringIO("\n".join(lines[header_at:])), delimiter=";")
        reader.fieldnames = [name.strip() for name in reader.fieldnames or ()]
        loaded = skipped = 0
        for row in reader:
            values = {
                field: (row.get(column) or "").strip() for field, column in _OENB_COLUMNS.items()
            }
            if not values["bank_code"].isdigit() or not values["name"]:
                skipped += 1
                continue
            if store.add(BankEntry(country="AT", **values)):
                loaded += 1
    except csv.Error as exc:
        msg = f"Cannot parse {path}: {exc}"
        raise BankDataError(msg) from exc
    return LoadReport(path=path, loaded=loaded, skipped=skipped)


Loader = Callable[[Path, InMemoryBankStore], LoadReport]


def _load_or_skip(loader: Loader, path: Path, store: InMemoryBankStore) -> LoadReport:
    try:
        return loader(path, store)
    except BankDataError as exc:
        logger.warning("Skipping %s: %s", path, exc)
        return LoadReport(path=path, error=str(exc))


def load_data_dir(base_path: Path, store: InMemoryBankStore) -> list[LoadReport]:
    """Load every supported registry file found in *base_path*.

    Never raises for bad data: a missing directory, a missing file or a
    file that cannot be read is logged and skipped. The service runs
    without registry data, it just cannot enrich results.
    """
    if not base_path.is_dir():
        logger.warning("Bank data directory %s not found, registry is empty", base_path)
        return []

    reports: list[LoadReport] = []
    bundesbank = base_path / BUNDESBANK_FILENAME
    if bundesbank.is_file():
        reports.append(_load_or_skip(load_bundesbank_data, bundesbank, store))
    else:
        logger.warning("%s not found in %s", BUNDESBANK_FILENAME, base_path)

    for csv_path in sorted(base_path.glob("*.csv")):
        loader = load_austria_data if is_oenb_file(csv_path) else load_csv_data
        reports.append(_load_or_skip(loader, csv_path, store))

    for report in reports:
        if report.error is not None:
            continue
        if report.skipped:
            logger.warning("Skipped %d malformed records in %s", report.skipped, report.path)
        logger.info("Loaded %d bank entries from %s", report.loaded, report.path)
    return reports
