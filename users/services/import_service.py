# FILE: medvanta/backend/users/services/import_service.py

"""
MEMBER IMPORT SERVICE

Bulk member import from the downloadable template (CSV or XLSX).

Template layout:
- Rows 1-4: instructions (ignored)
- Row 5 onward: first name | last name | email
- Header rows may be repeated anywhere in the data block

Validation sorts every data row into to-add, existing or failed; the
import then creates the to-add rows as pending members.
"""

import csv
import io
import logging
import os
import re
import zipfile
from dataclasses import dataclass, field
from typing import List

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from core.exceptions import ImportException

logger = logging.getLogger(__name__)

User = get_user_model()

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_HEADERS = ("email", "email*")


@dataclass
class ImportRow:
    row_number: int
    first_name: str
    last_name: str
    email: str


@dataclass
class RowError:
    row_number: int
    field: str
    message: str


@dataclass
class ImportValidationResult:
    users_to_add: List[ImportRow] = field(default_factory=list)
    existing_users: List[ImportRow] = field(default_factory=list)
    failed_users: List[ImportRow] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)


@dataclass
class ImportedUser:
    id: str
    email: str
    first_name: str
    last_name: str
    status: str


@dataclass
class ImportResult:
    created_users: List[ImportedUser] = field(default_factory=list)
    existing_users: List[ImportedUser] = field(default_factory=list)
    failed_users: List[ImportRow] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)


def _cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def is_header_row(row) -> bool:
    cells = [_cell_text(cell).lower() for cell in list(row)[:3]]
    cells += [""] * (3 - len(cells))
    return cells[0] == "first name" and cells[1] == "last name" and cells[2] in EMAIL_HEADERS


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class MemberImportService:
    """
    Service for validating and importing member spreadsheets.
    """

    def __init__(self):
        self.config = settings.IMPORT_CONFIG

    # =========================================================================
    # FILE READING
    # =========================================================================

    def read_rows(self, uploaded_file) -> List[list]:
        """
        Read the first sheet of an uploaded CSV or XLSX file as rows of cells.

        Args:
            uploaded_file: Django UploadedFile (name, size, read())

        Returns:
            List of rows, each a list of raw cell values
        """
        ext = os.path.splitext(uploaded_file.name or "")[1].lstrip(".").lower()
        if ext not in self.config["ALLOWED_FILE_TYPES"]:
            raise ImportException(
                f"File must be one of: {', '.join(self.config['ALLOWED_FILE_TYPES'])}."
            )
        if uploaded_file.size > self.config["MAX_FILE_SIZE_MB"] * 1024 * 1024:
            raise ImportException(f"File is larger than {self.config['MAX_FILE_SIZE_MB']} MB.")

        content = uploaded_file.read()
        if ext == "csv":
            return self._read_csv(content)
        return self._read_xlsx(content)

    def _read_csv(self, content) -> List[list]:
        if isinstance(content, bytes):
            try:
                content = content.decode("utf-8-sig")
            except UnicodeDecodeError:
                raise ImportException("CSV file must be UTF-8 encoded.")
        return [row for row in csv.reader(io.StringIO(content))]

    def _read_xlsx(self, content: bytes) -> List[list]:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            logger.warning(f"Unreadable XLSX upload: {e}")
            raise ImportException("No sheet found in Excel file.")

        try:
            if not workbook.sheetnames:
                raise ImportException("No sheet found in Excel file.")
            sheet = workbook[workbook.sheetnames[0]]
            return [list(row) for row in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_rows(self, rows: List[list]) -> ImportValidationResult:
        """
        Sort data rows into to-add, existing and failed.

        Rows are reported with 1-indexed row numbers. A repeated email
        within the file is dropped after its first occurrence.
        """
        result = ImportValidationResult()
        existing_emails = {email.lower() for email in User.objects.values_list("email", flat=True)}
        seen = set()

        for index in range(self.config["DATA_START_ROW_INDEX"], len(rows)):
            row = list(rows[index] or [])
            if not any(_cell_text(cell) for cell in row):
                continue
            if is_header_row(row):
                continue

            row += [None] * (3 - len(row))
            import_row = ImportRow(
                row_number=index + 1,
                first_name=_cell_text(row[0]),
                last_name=_cell_text(row[1]),
                email=_cell_text(row[2]),
            )

            if not import_row.email:
                result.errors.append(RowError(import_row.row_number, "Email", "Email is required"))
                result.failed_users.append(import_row)
                continue

            email_lower = import_row.email.lower()
            if email_lower in seen:
                continue
            seen.add(email_lower)

            if not is_valid_email(import_row.email):
                result.errors.append(RowError(import_row.row_number, "Email", "Invalid email format"))
                result.failed_users.append(import_row)
                continue

            if email_lower in existing_emails:
                result.existing_users.append(import_row)
            else:
                result.users_to_add.append(import_row)

        return result

    def validate_file(self, uploaded_file) -> ImportValidationResult:
        result = self.validate_rows(self.read_rows(uploaded_file))
        logger.info(
            f"Import validated: {len(result.users_to_add)} to add, "
            f"{len(result.existing_users)} existing, {len(result.failed_users)} failed"
        )
        return result

    # =========================================================================
    # IMPORT
    # =========================================================================

    def _create_pending_users(self, rows: List[ImportRow], result: ImportResult):
        for row in rows:
            try:
                with transaction.atomic():
                    user = User.objects.create_user(
                        email=row.email,
                        first_name=row.first_name,
                        last_name=row.last_name,
                        status=User.Status.PENDING,
                    )
            except IntegrityError:
                logger.warning(f"Import row {row.row_number}: {row.email} already registered")
                result.errors.append(RowError(row.row_number, "Email", "A user with this email already exists"))
                continue

            result.created_users.append(ImportedUser(
                id=str(user.id),
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                status=user.status,
            ))

    def _resolve_existing_users(self, rows: List[ImportRow], result: ImportResult):
        emails = [row.email.lower() for row in rows]
        by_email = {
            user.email.lower(): user
            for user in User.objects.filter(email__in=emails)
        }
        for row in rows:
            user = by_email.get(row.email.lower())
            if user is None:
                continue
            result.existing_users.append(ImportedUser(
                id=str(user.id),
                email=user.email,
                first_name=user.first_name or row.first_name,
                last_name=user.last_name or row.last_name,
                status=user.status,
            ))

    def import_file(self, uploaded_file) -> ImportResult:
        """
        Validate a file and create its new members as pending users.

        Args:
            uploaded_file: CSV or XLSX upload

        Returns:
            ImportResult with created, existing and failed rows plus errors
        """
        validation = self.validate_rows(self.read_rows(uploaded_file))

        result = ImportResult(
            failed_users=list(validation.failed_users),
            errors=list(validation.errors),
        )
        self._create_pending_users(validation.users_to_add, result)
        self._resolve_existing_users(validation.existing_users, result)

        logger.info(
            f"Import finished: {len(result.created_users)} created, "
            f"{len(result.existing_users)} existing, {len(result.failed_users)} failed"
        )
        return result
