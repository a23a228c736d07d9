import re
from typing import Optional

from sqlalchemy.orm import Session

from models.table_management import Table
from utils.exceptions import ConflictError

SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
UNSAFE_CHARACTERS_PATTERN = re.compile(r"['\";\\<>]")


def sanitize_input(value) -> str:
    """Strip markup and quoting characters from anonymous free text."""
    if not isinstance(value, str):
        return ""
    text = value.strip()
    text = SCRIPT_BLOCK_PATTERN.sub("", text)
    text = HTML_TAG_PATTERN.sub("", text)
    text = UNSAFE_CHARACTERS_PATTERN.sub("", text)
    return text.strip()


def validate_table_number_uniqueness(db: Session, number: str, exclude_id: Optional[int] = None):
    """Validate that no other table already uses this canonical number"""
    query = db.query(Table).filter(Table.number == number)
    if exclude_id is not None:
        query = query.filter(Table.id != exclude_id)

    if query.first():
        raise ConflictError("Bu masa numarası zaten kullanımda")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user search text matches literally (escape char is backslash)."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
