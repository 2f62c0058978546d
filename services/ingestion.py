"""
Bulk Ingestion Normalizer
Converts raw spreadsheet rows into validated due drafts.

Rows are independent: a malformed row is reported with its index and a
reason tag, and the remaining rows still go through. Nothing in here touches
the database.
"""
import datetime
import logging
import math
import numbers
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from models.enums import Category, DueStatus, PaymentStatus, PersonType, is_valid_due_type

logger = logging.getLogger(__name__)

# ==========================================
#   DATE DECODING
# ==========================================

# Spreadsheet serial dates count days from this epoch (serial 0)
SPREADSHEET_EPOCH = datetime.date(1899, 12, 30)
# Serial of 9999-12-31, the last date a spreadsheet can represent
MAX_SPREADSHEET_SERIAL = 2958465

DATE_FORMATS = [
    "%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d",
    "%d-%b-%Y", "%d %b %Y",
]

# ==========================================
#   ROW REJECTION REASONS
# ==========================================

INVALID_DATE = "invalid-date"
MISSING_PERSON_TYPE = "missing-person-type"
INVALID_AMOUNT = "invalid-amount"
INVALID_DUE_TYPE = "invalid-due-type"
INVALID_CATEGORY = "invalid-category"
INVALID_LINK = "invalid-link"
MISSING_FIELD = "missing-field"
INVALID_ROW = "invalid-row"

URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)

REQUIRED_TEXT_FIELDS = ["person_id", "person_name", "description", "department"]

# Column headers are matched ignoring case, spaces, underscores and hyphens
COLUMN_ALIASES = {
    "personid": "person_id",
    "rollnumber": "person_id",
    "facultyid": "person_id",
    "personname": "person_name",
    "name": "person_name",
    "persontype": "person_type",
    "department": "department",
    "description": "description",
    "amount": "amount",
    "duedate": "due_date",
    "category": "category",
    "duetype": "due_type",
    "link": "link",
}


@dataclass
class IngestionContext:
    default_department: str
    default_person_type: Optional[str] = None


@dataclass
class RowError:
    row_index: int
    reason: str
    detail: str = ""

    def to_dict(self) -> dict:
        return {"rowIndex": self.row_index, "reason": self.reason, "detail": self.detail}


@dataclass
class DueDraft:
    person_id: str
    person_name: str
    person_type: str
    department: str
    description: str
    amount: float
    due_date: datetime.date
    category: str
    due_type: str
    link: str
    date_added: datetime.date
    status: str = DueStatus.PENDING.value
    payment_status: str = PaymentStatus.DUE.value
    clear_date: Optional[datetime.date] = None
    row_index: Optional[int] = None  # position in the uploaded batch

    def to_model_kwargs(self) -> dict:
        kwargs = asdict(self)
        kwargs.pop("row_index")
        return kwargs


@dataclass
class IngestionResult:
    valid: List[DueDraft] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)


class RowRejected(Exception):
    def __init__(self, reason: str, field_name: str, detail: str):
        super().__init__(detail)
        self.reason = reason
        self.field = field_name
        self.detail = detail


# ==========================================
#   VALUE HELPERS
# ==========================================

def is_blank(value) -> bool:
    """None, empty strings and pandas NaN/NaT all count as blank"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def safe_str(value) -> Optional[str]:
    """Text value of a cell; whole floats from spreadsheets lose their '.0'"""
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def canonical_column(name) -> str:
    return re.sub(r"[\s_\-]", "", str(name)).lower()


def canonicalize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Map whatever headers the sheet used onto DueRecord attribute names"""
    fields = {}
    for key, value in row.items():
        attribute = COLUMN_ALIASES.get(canonical_column(key))
        # First non-blank value wins when several headers alias the same field
        if attribute and (attribute not in fields or is_blank(fields[attribute])):
            fields[attribute] = value
    return fields


def parse_date_string(text: str) -> Optional[datetime.date]:
    text = text.strip()
    try:
        return datetime.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        # Time of day and offset are dropped; the written calendar date is kept
        return datetime.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def decode_due_date(value) -> Optional[datetime.date]:
    """
    Decode a due date cell into a UTC calendar date.
    Accepts spreadsheet serial day numbers (day 0 = 1899-12-30), date strings
    and date/datetime objects. Returns None when the value is not a date.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime.datetime):  # also covers pandas Timestamp
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, numbers.Real):
        serial = float(value)
        if not math.isfinite(serial) or serial <= 0 or serial > MAX_SPREADSHEET_SERIAL:
            return None
        return SPREADSHEET_EPOCH + datetime.timedelta(days=int(serial))
    if isinstance(value, str):
        return parse_date_string(value)
    return None


def resolve_person_type(value) -> Optional[str]:
    text = safe_str(value)
    if not text:
        return None
    for person_type in PersonType:
        if text.casefold() == person_type.value.casefold():
            return person_type.value
    return None


def coerce_amount(value) -> Optional[float]:
    """Blank means 0. Returns None for anything non-numeric, NaN, infinite or negative."""
    if is_blank(value):
        return 0.0
    if isinstance(value, bool):
        return None
    try:
        amount = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount < 0:
        return None
    return amount


def normalize_tag(value) -> Optional[str]:
    """'Library Fine' -> 'library-fine'"""
    text = safe_str(value)
    if not text:
        return None
    return re.sub(r"[\s_]+", "-", text.lower())


# ==========================================
#   NORMALIZATION
# ==========================================

def normalize_row(
    row: Mapping[str, Any],
    context: IngestionContext,
    today: Optional[datetime.date] = None,
) -> DueDraft:
    """Validate one raw row. Raises RowRejected with the first problem found."""
    fields = canonicalize_row(row)

    # 1. Due date
    due_date = decode_due_date(fields.get("due_date"))
    if due_date is None:
        raise RowRejected(INVALID_DATE, "dueDate", f"Unreadable due date: {fields.get('due_date')!r}")

    # 2. Person type (explicit, else the context's implied type)
    person_type = resolve_person_type(fields.get("person_type")) or resolve_person_type(context.default_person_type)
    if person_type is None:
        raise RowRejected(MISSING_PERSON_TYPE, "personType", "Person type must be Student or Faculty")

    # 3. Department (row, else the uploader's department)
    department = safe_str(fields.get("department")) or safe_str(context.default_department)

    # 4. Amount
    amount = coerce_amount(fields.get("amount"))
    if amount is None:
        raise RowRejected(INVALID_AMOUNT, "amount", f"Amount must be a non-negative number: {fields.get('amount')!r}")

    # 5. Due type against the person type's vocabulary
    due_type = normalize_tag(fields.get("due_type"))
    if not due_type or not is_valid_due_type(person_type, due_type):
        raise RowRejected(INVALID_DUE_TYPE, "dueType", f"'{fields.get('due_type')}' is not a {person_type} due type")

    category = normalize_tag(fields.get("category")) or Category.PAYABLE.value
    if category not in [c.value for c in Category]:
        raise RowRejected(INVALID_CATEGORY, "category", f"Category must be payable or non-payable: {category!r}")

    link = safe_str(fields.get("link")) or ""
    if link and not URL_PATTERN.match(link):
        raise RowRejected(INVALID_LINK, "link", "Link must be an http(s) URL")

    text = {
        "person_id": safe_str(fields.get("person_id")),
        "person_name": safe_str(fields.get("person_name")),
        "description": safe_str(fields.get("description")),
        "department": department,
    }
    for name in REQUIRED_TEXT_FIELDS:
        if not text[name]:
            raise RowRejected(MISSING_FIELD, name, f"Missing required field '{name}'")

    return DueDraft(
        person_id=text["person_id"],
        person_name=text["person_name"],
        person_type=person_type,
        department=text["department"],
        description=text["description"],
        amount=amount,
        due_date=due_date,
        category=category,
        due_type=due_type,
        link=link,
        date_added=today or datetime.datetime.now(datetime.timezone.utc).date(),
    )


def normalize(
    rows: Sequence[Any],
    context: IngestionContext,
    today: Optional[datetime.date] = None,
) -> IngestionResult:
    """
    Normalize a batch. Never raises for row-level problems: valid drafts and
    per-row errors are returned side by side so the caller can report
    "N imported, M skipped" and the user can re-upload only the failures.
    """
    result = IngestionResult()

    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            result.errors.append(RowError(index, INVALID_ROW, "Row must be an object of named fields"))
            continue
        # Skip completely empty rows (trailing spreadsheet lines)
        if not row or all(is_blank(v) for v in row.values()):
            continue
        try:
            draft = normalize_row(row, context, today=today)
            draft.row_index = index
            result.valid.append(draft)
        except RowRejected as e:
            result.errors.append(RowError(index, e.reason, e.detail))

    logger.info(
        "Normalized %d rows for %s: %d valid, %d rejected",
        len(rows), context.default_department, len(result.valid), len(result.errors),
    )
    return result
