from __future__ import annotations

import re
from dataclasses import asdict, dataclass, fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from ..enhance.prompts import EnhancementType
from ..utils import today_stamp


class ReportKind(str, Enum):
    APR = "APR"
    CASE_HISTORY = "CASE_HISTORY"


DEFAULT_SCHOOL = "Tongi Children Education Program"
DEFAULT_DONOR = "ADRA Czech"
DEFAULT_CATEGORY = "Day"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

R = TypeVar("R", bound="_FlatRecord")


def _to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class _FlatRecord:
    """Shared behaviour for the flat, all-string report records."""

    @classmethod
    def field_names(cls) -> tuple:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def normalize(cls, data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        """Keep known keys only (snake_case or camelCase), coerced to strings."""
        known = set(cls.field_names())
        out: Dict[str, str] = {}
        for key, value in (data or {}).items():
            name = key if key in known else _to_snake(str(key))
            if name in known:
                out[name] = _as_text(value)
        return out

    @classmethod
    def from_dict(cls: Type[R], data: Optional[Mapping[str, Any]]) -> R:
        return cls(**cls.normalize(data))

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass
class AprRecord(_FlatRecord):
    # Header
    school_name: str = ""

    # Left column
    child_name: str = ""
    dob: str = ""
    sponsorship_category: str = ""
    gender: str = ""
    height: str = ""
    personality: str = ""
    fathers_name: str = ""
    fathers_status: str = ""
    family_income_source: str = ""

    # Middle column
    aid_no: str = ""
    donor_agency: str = ""
    aim_in_life: str = ""
    grade: str = ""
    weight: str = ""
    academic_year: str = ""
    mothers_name: str = ""
    mothers_status: str = ""
    monthly_income: str = ""

    # Narratives
    about_self_and_future: str = ""
    home_description: str = ""
    school_description: str = ""
    interesting_story: str = ""
    teachers_remarks: str = ""

    # Footer
    prepared_by: str = ""
    prepared_date: str = ""


@dataclass
class ChpRecord(_FlatRecord):
    school_name: str = ""
    child_name: str = ""
    aid_no: str = ""
    donor_agency: str = ""
    sponsorship_category: str = ""
    aim_in_life: str = ""
    dob: str = ""
    birth_place: str = ""
    gender: str = ""
    grade: str = ""
    height: str = ""
    weight: str = ""
    language_known: str = ""
    hobby: str = ""
    fathers_name: str = ""
    mothers_name: str = ""
    father_literacy: str = ""
    mother_literacy: str = ""
    siblings_sisters: str = ""
    siblings_brothers: str = ""
    family_income_source: str = ""
    monthly_income: str = ""

    child_profile: str = ""
    family_background: str = ""

    prepared_by: str = ""
    prepared_date: str = ""


@dataclass(frozen=True)
class AprRequest:
    record: AprRecord

    @property
    def kind(self) -> ReportKind:
        return ReportKind.APR


@dataclass(frozen=True)
class CaseHistoryRequest:
    record: ChpRecord

    @property
    def kind(self) -> ReportKind:
        return ReportKind.CASE_HISTORY


ReportRequest = Union[AprRequest, CaseHistoryRequest]


_KIND_ALIASES = {
    "apr": ReportKind.APR,
    "chp": ReportKind.CASE_HISTORY,
    "case_history": ReportKind.CASE_HISTORY,
    "case-history": ReportKind.CASE_HISTORY,
}


def parse_kind(value: Union[ReportKind, str]) -> ReportKind:
    if isinstance(value, ReportKind):
        return value
    kind = _KIND_ALIASES.get(value.strip().lower())
    if kind is None:
        return ReportKind(value)
    return kind


def make_request(kind: Union[ReportKind, str], data: Optional[Mapping[str, Any]]) -> ReportRequest:
    kind = parse_kind(kind)
    if kind is ReportKind.APR:
        return AprRequest(AprRecord.from_dict(data))
    return CaseHistoryRequest(ChpRecord.from_dict(data))


# Seed values applied before stored defaults.
APR_SEED: Dict[str, str] = {
    "school_name": DEFAULT_SCHOOL,
    "sponsorship_category": DEFAULT_CATEGORY,
    "donor_agency": DEFAULT_DONOR,
    "academic_year": "2025",
}

CHP_SEED: Dict[str, str] = {
    "school_name": DEFAULT_SCHOOL,
    "donor_agency": DEFAULT_DONOR,
    "sponsorship_category": DEFAULT_CATEGORY,
    "language_known": "Bangla",
}

# The only stored defaults a case history picks up.
CHP_DEFAULTED_FIELDS = ("school_name", "donor_agency", "sponsorship_category")


def apply_defaults(
    kind: Union[ReportKind, str],
    defaults: Optional[Mapping[str, Any]] = None,
    prepared_by: str = "",
    today: Optional[date] = None,
) -> Union[AprRecord, ChpRecord]:
    """Merge seeds, stored defaults and the preparer into a fully populated record."""
    kind = parse_kind(kind)
    stored = AprRecord.normalize(defaults)
    prepared_date = stored.get("prepared_date") or today_stamp(today)

    if kind is ReportKind.APR:
        values = {**APR_SEED, **stored}
        values["prepared_by"] = prepared_by or stored.get("prepared_by", "")
        values["prepared_date"] = prepared_date
        return AprRecord(**values)

    values = dict(CHP_SEED)
    for name in CHP_DEFAULTED_FIELDS:
        if stored.get(name):
            values[name] = stored[name]
    values["prepared_by"] = prepared_by
    values["prepared_date"] = prepared_date
    return ChpRecord(**values)


ENHANCEABLE_FIELDS: Dict[ReportKind, Dict[str, EnhancementType]] = {
    ReportKind.APR: {
        "about_self_and_future": EnhancementType.CHILD_NARRATIVE,
        "home_description": EnhancementType.CHILD_NARRATIVE,
        "school_description": EnhancementType.CHILD_NARRATIVE,
        "interesting_story": EnhancementType.CHILD_NARRATIVE,
        "teachers_remarks": EnhancementType.TEACHER_EVALUATION,
    },
    ReportKind.CASE_HISTORY: {
        "child_profile": EnhancementType.CASE_HISTORY_NARRATIVE,
        "family_background": EnhancementType.CASE_HISTORY_NARRATIVE,
    },
}


def enhancement_context(request: ReportRequest) -> str:
    r = request.record
    if isinstance(request, AprRequest):
        return f"Child Name: {r.child_name}, Age/Grade: {r.grade}, Aim: {r.aim_in_life}"
    return f"Child Name: {r.child_name}, Grade: {r.grade}, Aim: {r.aim_in_life}"
