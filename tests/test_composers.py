from docx.enum.text import WD_ALIGN_PARAGRAPH

from sponsorship_reports.docgen.assets import fallback_image_bytes
from sponsorship_reports.docgen.composers import (
    APR_QUESTIONS,
    APR_TEACHER_PROMPT,
    APR_TITLE,
    CHP_TITLE,
    build_apr,
    build_chp,
    with_unit,
)
from sponsorship_reports.reports.records import AprRecord, ChpRecord

LOGO = fallback_image_bytes()


def _justified(doc):
    return [p for p in doc.paragraphs if p.alignment == WD_ALIGN_PARAGRAPH.JUSTIFY]


def test_with_unit_only_for_non_empty_values():
    assert with_unit("132", " cm") == "132 cm"
    assert with_unit("", " cm") == ""
    assert with_unit("Day", "") == "Day"


def test_build_apr_with_empty_record():
    doc = build_apr(AprRecord(), LOGO)
    header, grid, footer = doc.tables

    assert any(p.text == APR_TITLE for p in doc.paragraphs)
    assert any(p.text == "Name of School: " for p in doc.paragraphs)

    left, middle, picture = grid.rows[0].cells
    assert len(left.paragraphs) == 9
    assert len(middle.paragraphs) == 9
    assert all(p.text.endswith(": ") for p in left.paragraphs + middle.paragraphs)
    assert "Height: " in [p.text for p in left.paragraphs]
    assert picture.paragraphs[-1].text == "Picture"
    assert picture.tables[0].cell(0, 0).text == ""

    blocks = _justified(doc)
    assert len(blocks) == len(APR_QUESTIONS) + 1
    assert blocks[-1].text == f"{APR_TEACHER_PROMPT} "

    assert footer.cell(0, 0).text == "Prepared By: "
    assert footer.cell(0, 1).text == "Prepared Date: "
    assert len(doc.inline_shapes) == 1


def test_build_apr_with_filled_record():
    rec = AprRecord(
        school_name="Tongi Children Education Program",
        child_name="Abir",
        aid_no="AC-TON-0001",
        height="132",
        weight="",
        about_self_and_future="I want to be a doctor.",
        prepared_by="General User",
        prepared_date="07.03.2025",
    )
    doc = build_apr(rec, LOGO)
    _, grid, footer = doc.tables
    left, middle, _ = grid.rows[0].cells

    left_text = [p.text for p in left.paragraphs]
    middle_text = [p.text for p in middle.paragraphs]
    assert left_text[0] == "Name of Child: Abir"
    assert "Height: 132 cm" in left_text
    assert "Weight: " in middle_text
    assert middle_text[0] == "Aid No: AC-TON-0001"

    school = next(p for p in doc.paragraphs if p.text.startswith("Name of School"))
    assert school.runs[1].bold is True

    assert _justified(doc)[0].text == "Write about yourself and your future: I want to be a doctor."
    assert footer.cell(0, 1).paragraphs[0].alignment == WD_ALIGN_PARAGRAPH.RIGHT
    assert footer.cell(0, 0).text == "Prepared By: General User"


def test_build_chp_with_empty_record():
    doc = build_chp(ChpRecord(), LOGO)
    _, grid, footer = doc.tables
    info, picture = grid.rows[0].cells

    assert any(p.text == CHP_TITLE for p in doc.paragraphs)
    # six detail rows plus the income row
    assert len(info.tables) == 7
    assert picture.paragraphs[-1].text == "Profile Picture"
    assert "Siblings: S- _ , B- _" in [p.text for p in info.paragraphs]
    assert [p.text for p in _justified(doc)] == ["Child Profile: ", "Family Background: "]
    assert footer.cell(0, 0).text == "Prepared By (Name): "


def test_build_chp_siblings_placeholder_for_missing_count():
    doc = build_chp(ChpRecord(siblings_sisters="2", siblings_brothers="", height="120"), LOGO)
    info = doc.tables[1].cell(0, 0)
    assert "Siblings: S- 2 , B- _" in [p.text for p in info.paragraphs]

    height_row = info.tables[4]
    assert height_row.cell(0, 0).text == "Height: 120 cm"
    assert height_row.cell(0, 1).text == "Weight: "


def test_cells_end_with_paragraph():
    doc = build_chp(ChpRecord(), LOGO)
    info = doc.tables[1].cell(0, 0)
    assert info._tc[-1].tag.endswith("}p")


def test_composers_are_deterministic():
    rec = AprRecord(child_name="Abir", aid_no="AC-TON-0001")
    first = build_apr(rec, LOGO).element.body.xml
    second = build_apr(rec, LOGO).element.body.xml
    assert first == second
