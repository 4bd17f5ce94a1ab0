"""
Bulk import/export of the whole family/member graph as flat rows.

Export flattens to one row per (family, member) pair; a family without members
still gets one row with the member columns left blank. Import is two steps: a pure
preview that regroups rows into families for the operator to review, then a
destructive commit that replaces every family and member with the reviewed set.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import ValidationError as SchemaError
from sqlalchemy import text
from sqlalchemy.orm import Session

from membership.core.auth import AuthContext
from membership.core.errors import ValidationError
from membership.core.logging import get_logger
from membership.models.entities import Family, FamilyStatusEnum, Member, MemberRoleEnum, utcnow
from membership.schemas.transfer import ImportFamily, ImportMember
from membership.services.families import apply_scalars, build_members
from membership.services.purge import purge_all_families

logger = get_logger(__name__)

COLUMNS = (
    "familyId",
    "membershipNumber",
    "familyName",
    "address",
    "phone",
    "email",
    "status",
    "joinDate",
    "aiSummary",
    "memberId",
    "firstName",
    "lastName",
    "role",
    "birthDate",
    "gender",
    "memberEmail",
    "memberPhone",
    "notes",
)

# Header row written by the association's earlier spreadsheet exports.
LEGACY_HEADERS = {
    "IdFamilia": "familyId",
    "NumeroSocio": "membershipNumber",
    "NombreFamilia": "familyName",
    "Direccion": "address",
    "TelefonoFamilia": "phone",
    "EmailFamilia": "email",
    "Estado": "status",
    "FechaAlta": "joinDate",
    "IdMiembro": "memberId",
    "NombreMiembro": "firstName",
    "ApellidosMiembro": "lastName",
    "Rol": "role",
    "FechaNacimiento": "birthDate",
    "Genero": "gender",
    "EmailMiembro": "memberEmail",
    "TelefonoMiembro": "memberPhone",
}

LEGACY_STATUSES = {"Activo": FamilyStatusEnum.active, "Baja": FamilyStatusEnum.inactive}
LEGACY_ROLES = {
    "Padre": MemberRoleEnum.father,
    "Madre": MemberRoleEnum.mother,
    "Hijo/a": MemberRoleEnum.child,
    "Tutor": MemberRoleEnum.tutor,
}

_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y")
BOM = "\ufeff"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _family_cells(family: Family) -> dict[str, str]:
    return {
        "familyId": _cell(family.id),
        "membershipNumber": _cell(family.membership_number),
        "familyName": _cell(family.name),
        "address": _cell(family.address),
        "phone": _cell(family.phone),
        "email": _cell(family.email),
        "status": _cell(family.status),
        "joinDate": _cell(family.join_date),
        "aiSummary": _cell(family.ai_summary),
    }


def _member_cells(member: Member | None) -> dict[str, str]:
    if member is None:
        return {key: "" for key in COLUMNS[9:]}
    return {
        "memberId": _cell(member.id),
        "firstName": _cell(member.first_name),
        "lastName": _cell(member.last_name),
        "role": _cell(member.role),
        "birthDate": _cell(member.birth_date),
        "gender": _cell(member.gender),
        "memberEmail": _cell(member.email),
        "memberPhone": _cell(member.phone),
        "notes": _cell(member.notes),
    }


def export_rows(families: Iterable[Family]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for family in families:
        head = _family_cells(family)
        for member in family.members or [None]:
            rows.append({**head, **_member_cells(member)})
    return rows


def render_csv(rows: Iterable[dict[str, str]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=COLUMNS, delimiter=";", lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return BOM + buffer.getvalue()


def export_filename(today: date | None = None) -> str:
    return f"Backup_AMPA_{(today or utcnow().date()).isoformat()}.csv"


# --- preview -----------------------------------------------------------------


def _parse_int(value: str) -> int | None:
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _parse_date(value: str) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _parse_enum(value: str, enum_cls: type[Enum], legacy: dict[str, Enum], line: int, label: str):
    if value in legacy:
        return legacy[value]
    try:
        return enum_cls(value.upper())
    except ValueError:
        raise ValidationError(f"line {line}: unknown {label} {value!r}") from None


def _header_keys(header: Sequence[str]) -> list[str | None]:
    keys: list[str | None] = []
    for raw in header:
        name = raw.strip().lstrip(BOM)
        keys.append(LEGACY_HEADERS.get(name, name if name in COLUMNS else None))
    if "familyName" not in keys:
        raise ValidationError("line 1: header has no family name column")
    return keys


def _read_rows(raw_text: str) -> list[tuple[int, dict[str, str]]]:
    content = raw_text.lstrip(BOM)
    first_line = content.split("\n", 1)[0]
    delimiter = ";" if first_line.count(";") >= first_line.count(",") else ","
    reader = csv.reader(io.StringIO(content, newline=""), delimiter=delimiter)

    header = next(reader, None)
    if header is None:
        return []
    keys = _header_keys(header)

    rows: list[tuple[int, dict[str, str]]] = []
    for cells in reader:
        if not any(cell.strip() for cell in cells):
            continue
        record = {key: "" for key in COLUMNS}
        for key, cell in zip(keys, cells):
            if key is not None:
                record[key] = cell.strip()
        rows.append((reader.line_num, record))
    return rows


def _member_from_row(line: int, row: dict[str, str]) -> dict[str, Any] | None:
    if not (row["memberId"] or row["firstName"] or row["lastName"]):
        return None
    if not row["role"]:
        raise ValidationError(f"line {line}: member has no role")
    return {
        "id": _parse_int(row["memberId"]),
        "firstName": row["firstName"],
        "lastName": row["lastName"],
        "role": _parse_enum(row["role"], MemberRoleEnum, LEGACY_ROLES, line, "member role"),
        "birthDate": _parse_date(row["birthDate"]),
        "gender": row["gender"],
        "email": row["memberEmail"],
        "phone": row["memberPhone"],
        "notes": row["notes"],
    }


def parse_preview(raw_text: str) -> list[ImportFamily]:
    """
    Regroup flat rows into families for review. Nothing is stored.

    Rows are grouped on the family id cell. Blank or non-numeric ids get a
    synthesized id above every id in the file: rows sharing the same non-numeric
    cell share that id, each blank cell starts a family of its own.
    """
    groups: dict[tuple[str, Any], dict[str, Any]] = {}
    for line, row in _read_rows(raw_text):
        family_id = _parse_int(row["familyId"])
        if family_id is not None:
            key: tuple[str, Any] = ("id", family_id)
        elif row["familyId"]:
            key = ("raw", row["familyId"])
        else:
            key = ("line", line)

        group = groups.get(key)
        if group is None:
            status = row["status"]
            group = groups[key] = {
                "line": line,
                "id": family_id,
                "membershipNumber": row["membershipNumber"],
                "name": row["familyName"],
                "address": row["address"],
                "phone": row["phone"],
                "email": row["email"],
                "status": (
                    _parse_enum(status, FamilyStatusEnum, LEGACY_STATUSES, line, "status")
                    if status
                    else FamilyStatusEnum.active
                ),
                "joinDate": _parse_date(row["joinDate"]),
                "aiSummary": row["aiSummary"],
                "members": [],
            }
        member = _member_from_row(line, row)
        if member is not None:
            group["members"].append(member)

    next_id = max((g["id"] for g in groups.values() if g["id"] is not None), default=0) + 1
    families: list[ImportFamily] = []
    for group in groups.values():
        if group["id"] is None:
            group["id"] = next_id
            next_id += 1
        line = group.pop("line")
        try:
            families.append(ImportFamily.model_validate(group))
        except SchemaError as exc:
            first = exc.errors()[0]
            where = ".".join(str(part) for part in first["loc"])
            raise ValidationError(f"line {line}: {where}: {first['msg']}") from None
    return families


# --- commit ------------------------------------------------------------------


def _check_unique(values: Iterable[Any], label: str) -> None:
    seen: set[Any] = set()
    for value in values:
        if value in seen:
            raise ValidationError(f"duplicate {label} {value}")
        seen.add(value)


def _check_numbering(families: Iterable[ImportFamily]) -> None:
    # A numeric number that is not the row's own id would be handed out again by create.
    for family in families:
        number = family.membership_number
        if number and number.isdigit() and number != str(family.id):
            raise ValidationError(f"membership number {number} does not match family id {family.id}")


def _realign_sequences(db: Session) -> None:
    # Explicit ids do not advance PostgreSQL serial sequences.
    if db.get_bind().dialect.name != "postgresql":
        return
    for table in ("families", "members"):
        db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
            )
        )


def _import_member(family_id: int, payload: ImportMember) -> Member:
    member = build_members(family_id, [payload])[0]
    member.id = payload.id
    return member


def commit_import(db: Session, families: Sequence[ImportFamily], actor: AuthContext) -> None:
    """
    Replace the entire family/member collection with `families`.

    Ids and membership numbers are written as given; a numeric membership number
    must equal its family id. Members without an id are inserted after the explicit
    ones so generated ids cannot collide with them.
    """
    _check_unique((f.id for f in families), "family id")
    _check_unique((f.membership_number or str(f.id) for f in families), "membership number")
    _check_unique((m.id for f in families for m in f.members if m.id is not None), "member id")
    _check_numbering(families)

    purge_all_families(db)

    now = utcnow()
    created_by = f"Import CSV ({actor.username})"
    without_id: list[tuple[int, ImportMember]] = []
    for payload in families:
        family = Family(
            id=payload.id,
            membership_number=payload.membership_number or str(payload.id),
            created_by=payload.created_by or created_by,
            created_at=now,
            updated_at=now,
        )
        apply_scalars(family, payload)
        db.add(family)
        for member in payload.members:
            if member.id is None:
                without_id.append((payload.id, member))
            else:
                db.add(_import_member(payload.id, member))
    db.flush()
    _realign_sequences(db)

    for family_id, member in without_id:
        db.add_all(build_members(family_id, [member]))
    db.commit()

    logger.info(
        "import committed",
        families=len(families),
        members=sum(len(f.members) for f in families),
        actor=actor.username,
    )
