"""Setup code records."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

CODE_LENGTH = 8
CODE_PATTERN = re.compile(r"^\d{3}-\d{2}-\d{3}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CodeFormat(str, Enum):
    NUMERIC = "numeric"
    QR_CODE = "qrCode"
    NFC = "nfc"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return CODE_FORMAT_LABELS[self]


CODE_FORMAT_LABELS: dict[CodeFormat, str] = {
    CodeFormat.NUMERIC: "XXX-XX-XXX",
    CodeFormat.QR_CODE: "QR Code",
    CodeFormat.NFC: "NFC Tag",
    CodeFormat.UNKNOWN: "Unknown",
}


def normalize_code_input(text: str) -> str:
    """Keep the digits of ``text``, at most eight of them."""
    return "".join(ch for ch in text if ch.isdigit())[:CODE_LENGTH]


def format_setup_code(text: str) -> str:
    """Format typed input as ``XXX-XX-XXX``, dashing as far as digits go.

    >>> format_setup_code("123456789ABC")
    '123-45-678'
    >>> format_setup_code("1234")
    '123-4'
    """
    formatted = ""
    for index, digit in enumerate(normalize_code_input(text)):
        if index in (3, 5):
            formatted += "-"
        formatted += digit
    return formatted


class SetupCodeRecord(BaseModel):
    """A setup code as entered by the user.

    ``accessory_id`` weakly refers to ``AccessoryRecord.home_kit_uuid``;
    ``accessory_name`` is the fallback join key when it is absent.
    """

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    id: UUID = Field(default_factory=uuid4, frozen=True)
    accessory_id: UUID | None = None
    accessory_name: str
    manufacturer: str = "Unknown"
    model: str = "Unknown"
    code: str
    code_format: CodeFormat = CodeFormat.NUMERIC
    photo_path: str | None = None
    code_location: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_timestamps(self) -> SetupCodeRecord:
        if self.updated_at < self.created_at:
            raise ValueError("updated_at must not precede created_at")
        return self

    @property
    def is_valid_format(self) -> bool:
        return CODE_PATTERN.match(self.code) is not None

    @property
    def formatted_code(self) -> str:
        digits = "".join(ch for ch in self.code if ch.isdigit())
        if len(digits) != CODE_LENGTH:
            return self.code
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"

    def touched(self) -> SetupCodeRecord:
        """Copy with ``updated_at`` refreshed."""
        return self.model_copy(update={"updated_at": max(utcnow(), self.created_at)})
