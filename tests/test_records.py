from datetime import date

from sponsorship_reports.reports.records import (
    AprRecord,
    AprRequest,
    CaseHistoryRequest,
    ChpRecord,
    ReportKind,
    apply_defaults,
    enhancement_context,
    make_request,
    parse_kind,
)


def test_from_dict_coerces_missing_and_none_to_empty():
    rec = AprRecord.from_dict({"child_name": "Abir", "aid_no": None, "height": 132, "unknown": "x"})
    assert rec.child_name == "Abir"
    assert rec.aid_no == ""
    assert rec.height == "132"
    assert rec.teachers_remarks == ""


def test_from_dict_accepts_camel_case_keys():
    rec = ChpRecord.from_dict({"childName": "Mim", "siblingsSisters": "2", "fatherLiteracy": "Literate"})
    assert rec.child_name == "Mim"
    assert rec.siblings_sisters == "2"
    assert rec.father_literacy == "Literate"


def test_make_request_is_tagged_by_kind():
    assert isinstance(make_request("apr", {}), AprRequest)
    assert isinstance(make_request("CASE_HISTORY", {}), CaseHistoryRequest)
    assert parse_kind("chp") is ReportKind.CASE_HISTORY
    assert make_request(ReportKind.APR, {}).kind is ReportKind.APR


def test_apply_defaults_apr_takes_all_stored_defaults():
    rec = apply_defaults(
        "apr",
        {"donorAgency": "ADRA Japan", "academic_year": "2026", "grade": "5"},
        prepared_by="General User",
        today=date(2025, 3, 7),
    )
    assert rec.school_name == "Tongi Children Education Program"
    assert rec.sponsorship_category == "Day"
    assert rec.donor_agency == "ADRA Japan"
    assert rec.academic_year == "2026"
    assert rec.grade == "5"
    assert rec.prepared_by == "General User"
    assert rec.prepared_date == "07.03.2025"


def test_apply_defaults_chp_only_takes_school_donor_category():
    rec = apply_defaults(
        "chp",
        {"school_name": "Dhaka School", "grade": "5", "donor_agency": "", "prepared_date": "01.01.2025"},
        prepared_by="System Administrator",
    )
    assert rec.school_name == "Dhaka School"
    assert rec.donor_agency == "ADRA Czech"
    assert rec.grade == ""
    assert rec.language_known == "Bangla"
    assert rec.prepared_by == "System Administrator"
    assert rec.prepared_date == "01.01.2025"


def test_enhancement_context_strings():
    apr = make_request("apr", {"child_name": "Abir", "grade": "4", "aim_in_life": "Doctor"})
    chp = make_request("chp", {"child_name": "Mim", "grade": "2", "aim_in_life": "Teacher"})
    assert enhancement_context(apr) == "Child Name: Abir, Age/Grade: 4, Aim: Doctor"
    assert enhancement_context(chp) == "Child Name: Mim, Grade: 2, Aim: Teacher"
