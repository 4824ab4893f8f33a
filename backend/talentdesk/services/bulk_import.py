"""
Bulk candidate import from Excel sheets.

STRATEGY:
 - Accept any sheet layout; columns are matched flexibly (see column_mapping)
 - Only skip rows whose identifying fields are all empty
 - Rows without a usable email get a placeholder address so they still save
 - Upsert by email: known email -> update, unknown or placeholder -> create
 - New candidates are created one at a time; each takes the next identifier
   from the atomic counter inside its own insert transaction
 - Updates run concurrently and only touch fields the sheet actually filled
"""
import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, List, Optional, Tuple

import openpyxl

from ..config import get_settings
from ..models.candidate import VALID_STATUSES
from ..schemas.bulk_import import ImportErrorDetail, ImportSummary
from .column_mapping import cell_value, resolve_columns
from .identity import Recruiter

logger = logging.getLogger(__name__)
settings = get_settings()

IDENTIFYING_FIELDS = ("name", "email", "contact", "position", "client", "skills")

# Plain text fields copied from the sheet as-is
TEXT_FIELDS = (
    "position", "client", "current_location", "preferred_location",
    "total_experience", "relevant_experience", "ctc", "ectc", "take_home_salary",
    "notice_period", "remarks", "source", "current_company", "education",
    "gender", "linkedin", "industry", "date_of_birth",
)

_STATUS_LOOKUP = {status.lower(): status for status in VALID_STATUSES}


class WorkbookError(ValueError):
    """The uploaded file could not be read as a workbook."""


@dataclass
class ImportRow:
    row_number: int
    values: Dict[str, str]
    email: str
    is_placeholder: bool
    skills: List[str] = field(default_factory=list)
    status: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.values.get("name") or "Unknown"

    def create_payload(self, recruiter: Recruiter) -> Dict[str, Any]:
        """Full record for a new candidate, with import defaults filled in."""
        payload = {name: self.values.get(name, "") for name in TEXT_FIELDS}
        payload.update(
            name=self.display_name,
            email=self.email,
            contact=self.values.get("contact", ""),
            skills=self.skills,
            status=self.status or [settings.default_candidate_status],
            source=self.values.get("source") or settings.default_import_source,
            recruiter_id=recruiter.id,
            recruiter_name=recruiter.display_name,
            active=True,
        )
        return payload

    def update_fields(self) -> Dict[str, Any]:
        """Only what the sheet filled in; blank cells never overwrite stored data."""
        fields = {
            name: value
            for name, value in self.values.items()
            if value and name != "email"
        }
        if self.skills:
            fields["skills"] = self.skills
        if self.status:
            fields["status"] = self.status
        return fields


@dataclass
class ReconcileOutcome:
    created: int = 0
    updated: int = 0
    errors: List[ImportErrorDetail] = field(default_factory=list)


# ============================================================================
# Sheet reading and row parsing
# ============================================================================

def _unique_headers(raw_headers) -> List[str]:
    raw_headers = list(raw_headers)
    raw_names = {str(value).strip() for value in raw_headers if value is not None}
    headers = []
    used = set()
    for value in raw_headers:
        header = str(value).strip() if value is not None else ""
        if header:
            base, suffix = header, 0
            # A generated name may itself be a real header further along
            while header in used or (suffix and header in raw_names):
                suffix += 1
                header = f"{base}_{suffix}"
            used.add(header)
        headers.append(header)
    return headers


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_worksheet(content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    """
    Read the first worksheet into header -> value records.

    Fully blank rows are dropped. Raises WorkbookError if the file is not a
    readable workbook.
    """
    try:
        wb = openpyxl.load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise WorkbookError(f"Could not read Excel file: {e}") from e

    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None:
            return [], []

        headers = _unique_headers(header_row)
        records = []
        for row in rows:
            if all(_is_blank(value) for value in row):
                continue
            records.append({header: value for header, value in zip(headers, row) if header})
    finally:
        wb.close()

    return [header for header in headers if header], records


def split_skills(raw: str) -> List[str]:
    """Split on comma, semicolon, pipe or newline; drop blanks and repeats."""
    skills = []
    seen = set()
    for part in re.split(r"[,;|\n]+", raw):
        skill = part.strip()
        if skill and skill.lower() not in seen:
            seen.add(skill.lower())
            skills.append(skill)
    return skills


def parse_status(raw: str) -> List[str]:
    """Recognised statuses in the cell, in canonical spelling. Unknown text is dropped."""
    statuses = []
    for part in re.split(r"[,;|]+", raw):
        status = _STATUS_LOOKUP.get(part.strip().lower())
        if status and status not in statuses:
            statuses.append(status)
    return statuses


def clean_contact(raw: str) -> str:
    """Digits only, last 10 (drops country codes and separators)."""
    return re.sub(r"\D", "", raw)[-10:]


def placeholder_email(row_number: int) -> str:
    return f"imported_{int(time.time() * 1000)}_{row_number}@{settings.placeholder_email_domain}"


def is_placeholder_email(email: str) -> bool:
    return email.endswith(f"@{settings.placeholder_email_domain}")


def build_row(record: Dict[str, Any], columns: Dict[str, Optional[str]], row_number: int) -> Optional[ImportRow]:
    """Turn one sheet record into an ImportRow, or None for an empty row."""
    values = {name: cell_value(record, column) for name, column in columns.items()}
    values["email"] = values["email"].lower()
    values["contact"] = re.sub(r"[^\d+\-\s]", "", values["contact"]).strip()

    if not any(values[name] for name in IDENTIFYING_FIELDS):
        return None

    values["contact"] = clean_contact(values["contact"])
    skills = split_skills(values.pop("skills"))
    raw_status = values.pop("status")
    status = parse_status(raw_status)
    if raw_status and not status:
        # Text the pipeline does not know resets to the fallback stage
        status = [settings.default_candidate_status]
    email = values["email"]
    has_real_email = "@" in email and not is_placeholder_email(email)

    return ImportRow(
        row_number=row_number,
        values=values,
        email=email if has_real_email else placeholder_email(row_number),
        is_placeholder=not has_real_email,
        skills=skills,
        status=status,
    )


def parse_rows(
    records: List[Dict[str, Any]],
    columns: Dict[str, Optional[str]],
) -> Tuple[List[ImportRow], List[ImportErrorDetail]]:
    rows: List[ImportRow] = []
    errors: List[ImportErrorDetail] = []

    for index, record in enumerate(records):
        row_number = index + 2  # Excel row number (1-indexed + header)
        try:
            row = build_row(record, columns, row_number)
        except Exception as e:
            logger.error(f"Row {row_number} parse error: {e}")
            errors.append(ImportErrorDetail(row=row_number, candidate="Unknown", error=f"Parse error: {e}"))
            continue

        if row is None:
            logger.debug(f"Row {row_number}: skipping empty row")
            continue
        rows.append(row)

    return rows, errors


# ============================================================================
# Reconciliation against stored candidates
# ============================================================================

async def reconcile(rows: List[ImportRow], store, recruiter: Recruiter) -> ReconcileOutcome:
    """
    Create or update a candidate for every row.

    ``store`` provides ``find_existing_emails(emails)``, ``create(data)`` and
    ``update_fields(email, fields)``. Failures are collected per row.
    """
    outcome = ReconcileOutcome()

    real_emails = sorted({row.email for row in rows if not row.is_placeholder})
    existing = await store.find_existing_emails(real_emails) if real_emails else set()

    new_rows = [row for row in rows if row.is_placeholder or row.email not in existing]
    update_rows = [row for row in rows if not row.is_placeholder and row.email in existing]
    logger.info(f"New: {len(new_rows)}, existing to update: {len(update_rows)}")

    # Sequential on purpose: each create takes the next counter value
    for row in new_rows:
        try:
            candidate_id = await store.create(row.create_payload(recruiter))
        except Exception as e:
            logger.error(f"CREATE failed row {row.row_number} ({row.display_name}): {e}")
            outcome.errors.append(ImportErrorDetail(
                row=row.row_number, candidate=row.display_name, error=f"Create failed: {e}"
            ))
            continue
        outcome.created += 1
        logger.info(f"Created {candidate_id} - {row.display_name}")

    semaphore = asyncio.Semaphore(max(1, settings.import_update_concurrency))

    async def _update(row: ImportRow) -> bool:
        async with semaphore:
            return await store.update_fields(row.email, row.update_fields())

    results = await asyncio.gather(*(_update(row) for row in update_rows), return_exceptions=True)

    for row, result in zip(update_rows, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, Exception) or not result:
            reason = str(result) if isinstance(result, Exception) else "candidate not found"
            logger.error(f"UPDATE failed row {row.row_number} ({row.display_name}): {reason}")
            outcome.errors.append(ImportErrorDetail(
                row=row.row_number, candidate=row.display_name, error=f"Update failed: {reason}"
            ))
            continue
        outcome.updated += 1
        logger.info(f"Updated - {row.display_name}")

    return outcome


async def import_candidates(content: bytes, recruiter: Recruiter, store) -> ImportSummary:
    """Read a workbook, map its columns and upsert every usable row."""
    logger.info(f"=== BULK IMPORT START === recruiter={recruiter.id}")

    try:
        headers, records = read_worksheet(content)
    except WorkbookError as e:
        logger.warning(str(e))
        return ImportSummary(success=False, message=str(e))

    if not records:
        return ImportSummary(success=False, message="Excel file is empty or has no data rows.")

    columns = resolve_columns(headers)
    logger.info(f"Columns detected: {headers}; total data rows: {len(records)}")
    logger.debug(f"Column map: {columns}")

    rows, errors = parse_rows(records, columns)
    logger.info(f"Validated: {len(rows)} valid rows, {len(errors)} parse errors")

    if not rows:
        return ImportSummary(
            success=False,
            message="No data rows found in the Excel file. Please check the file has data below the header row.",
            total=len(records),
            errors=errors[:settings.import_preview_error_limit],
        )

    outcome = await reconcile(rows, store, recruiter)
    errors.extend(outcome.errors)

    logger.info(
        f"=== DONE: {outcome.created} created, {outcome.updated} updated, {len(errors)} errors ==="
    )
    return ImportSummary(
        success=True,
        message=(
            f"Import complete: {outcome.created} new candidate(s) added, "
            f"{outcome.updated} existing updated."
        ),
        imported=outcome.created + outcome.updated,
        created=outcome.created,
        updated=outcome.updated,
        duplicates=outcome.updated,
        total=len(records),
        errors=errors[:settings.import_error_limit],
    )
