"""Render the inventory and the code vault to CSV, JSON or text."""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from hkrestore.errors import ExportError
from hkrestore.models import AccessoryRecord, GroupKey, SetupCodeRecord, utcnow

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "Name",
    "Manufacturer",
    "Model",
    "Category",
    "Room",
    "Home",
    "Setup Code",
    "Code Location",
    "Reachable",
    "Last Seen",
    "Notes",
)

DISPLAY_DATE_FORMAT = "%b %d, %Y %H:%M"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    TEXT = "text"

    @property
    def suffix(self) -> str:
        return ".txt" if self is ExportFormat.TEXT else f".{self.value}"


class ExportCode(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    accessory_name: str
    manufacturer: str
    model: str
    code: str
    code_format: str
    code_location: str | None
    notes: str | None
    created_at: datetime


class ExportDocument(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    export_date: datetime
    accessories: list[AccessoryRecord]
    codes: list[ExportCode]


def format_date(value: datetime) -> str:
    return value.astimezone().strftime(DISPLAY_DATE_FORMAT)


def find_code(
    accessory: AccessoryRecord, codes: Sequence[SetupCodeRecord]
) -> SetupCodeRecord | None:
    """Code for ``accessory``: by HomeKit UUID first, then by exact name."""
    if accessory.home_kit_uuid is not None:
        for code in codes:
            if code.accessory_id == accessory.home_kit_uuid:
                return code
    for code in codes:
        if code.accessory_name == accessory.name:
            return code
    return None


def unmatched_codes(
    accessories: Sequence[AccessoryRecord], codes: Sequence[SetupCodeRecord]
) -> list[SetupCodeRecord]:
    joined = set()
    for accessory in accessories:
        code = find_code(accessory, codes)
        if code is not None:
            joined.add(code.id)
    return [code for code in codes if code.id not in joined]


def render_csv(
    accessories: Sequence[AccessoryRecord], codes: Sequence[SetupCodeRecord]
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_HEADER)

    for accessory in accessories:
        code = find_code(accessory, codes)
        writer.writerow(
            (
                accessory.name,
                accessory.manufacturer,
                accessory.model,
                accessory.category,
                accessory.room or "",
                accessory.home or "",
                (code.code if code else None) or accessory.setup_code or "",
                (code.code_location if code else None) or "",
                "Yes" if accessory.is_reachable else "No",
                format_date(accessory.last_seen),
                accessory.notes or (code.notes if code else None) or "",
            )
        )

    for code in unmatched_codes(accessories, codes):
        writer.writerow(
            (
                code.accessory_name,
                code.manufacturer,
                code.model,
                "",
                "",
                "",
                code.code,
                code.code_location or "",
                "",
                format_date(code.created_at),
                code.notes or "",
            )
        )

    return buffer.getvalue()


def render_json(
    accessories: Sequence[AccessoryRecord],
    codes: Sequence[SetupCodeRecord],
    exported_at: datetime | None = None,
) -> str:
    document = ExportDocument(
        export_date=exported_at or utcnow(),
        accessories=list(accessories),
        codes=[
            ExportCode(
                accessory_name=code.accessory_name,
                manufacturer=code.manufacturer,
                model=code.model,
                code=code.code,
                code_format=code.code_format.label,
                code_location=code.code_location,
                notes=code.notes,
                created_at=code.created_at,
            )
            for code in codes
        ],
    )
    payload = document.model_dump(mode="json", by_alias=True)
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def render_text(
    accessories: Sequence[AccessoryRecord],
    codes: Sequence[SetupCodeRecord],
    generated_at: datetime | None = None,
) -> str:
    lines = [
        "HomeKit Device Inventory",
        "========================",
        "",
        f"Generated: {format_date(generated_at or utcnow())}",
        "",
    ]

    by_home: dict[str, list[AccessoryRecord]] = {}
    for accessory in accessories:
        by_home.setdefault(accessory.home or GroupKey.HOME.sentinel, []).append(accessory)

    for home, members in sorted(by_home.items()):
        lines += ["", home, "-" * 40, ""]
        for accessory in members:
            lines += [
                accessory.name,
                f"  Manufacturer: {accessory.manufacturer}",
                f"  Model: {accessory.model}",
                f"  Room: {accessory.room or GroupKey.ROOM.sentinel}",
                f"  Category: {accessory.category}",
            ]
            code = find_code(accessory, codes)
            if code is not None:
                lines.append(f"  Setup Code: {code.formatted_code}")
                if code.code_location:
                    lines.append(f"  Code Location: {code.code_location}")
            lines.append("")

    lines += ["", "", "Saved Setup Codes", "=================", ""]
    for code in codes:
        lines += [
            code.accessory_name,
            f"  Code: {code.formatted_code}",
            f"  Manufacturer: {code.manufacturer}",
        ]
        if code.code_location:
            lines.append(f"  Location: {code.code_location}")
        lines.append("")

    return "\n".join(lines)


def render(
    fmt: ExportFormat,
    accessories: Sequence[AccessoryRecord],
    codes: Sequence[SetupCodeRecord],
    now: datetime | None = None,
) -> str:
    if fmt is ExportFormat.CSV:
        return render_csv(accessories, codes)
    if fmt is ExportFormat.JSON:
        return render_json(accessories, codes, exported_at=now)
    return render_text(accessories, codes, generated_at=now)


def default_filename(fmt: ExportFormat, day: date) -> str:
    return f"homekit_inventory_{day.isoformat()}{fmt.suffix}"


def write_export(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Failed to export to {path}: {exc}") from exc
    logger.info("Exported %d bytes to %s", len(content), path)
