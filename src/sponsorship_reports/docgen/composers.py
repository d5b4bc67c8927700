"""Report composers: record + logo bytes -> python-docx Document.

Both composers are pure functions of their inputs. The layout is a tree of
borderless tables; the only embedded image is the organization logo.
"""
from __future__ import annotations

from typing import Sequence, Tuple

from docx import Document
from docx.document import Document as DocxDocument
from docx.shared import Twips

from ..reports.records import AprRecord, ChpRecord
from .layout import (
    Container,
    FIELD_GAP,
    borderless_table,
    close_cells,
    field_line,
    header_block,
    label_value,
    placeholder_box,
    preparer_footer,
    question_block,
    spacer,
    split_row,
    styled_run,
    title_line,
)

# A4, in twips
PAGE_WIDTH = Twips(11906)
PAGE_HEIGHT = Twips(16838)
MARGIN_TOP_BOTTOM = Twips(500)
MARGIN_LEFT_RIGHT = Twips(720)

APR_TITLE = "Child Annual Progress Report (APR) 2025"
CHP_TITLE = "Child Sponsorship Profile/Case History"

APR_BOX_HEIGHT = Twips(3600)
CHP_BOX_HEIGHT = Twips(4500)

# (label, record attribute, unit suffix)
FieldSpec = Tuple[str, str, str]

APR_LEFT_COLUMN: Sequence[FieldSpec] = (
    ("Name of Child", "child_name", ""),
    ("Date of Birth", "dob", ""),
    ("Sponsorship Category", "sponsorship_category", ""),
    ("Gender", "gender", ""),
    ("Height", "height", " cm"),
    ("Personality", "personality", ""),
    ("Father's Name", "fathers_name", ""),
    ("Father's Status", "fathers_status", ""),
    ("Family Income Source", "family_income_source", ""),
)

APR_MIDDLE_COLUMN: Sequence[FieldSpec] = (
    ("Aid No", "aid_no", ""),
    ("Donor Agency", "donor_agency", ""),
    ("Aim in Life", "aim_in_life", ""),
    ("Grade", "grade", ""),
    ("Weight", "weight", " kg"),
    ("Academic Year", "academic_year", ""),
    ("Mother's Name", "mothers_name", ""),
    ("Mother's Status", "mothers_status", ""),
    ("Monthly Income (BDT)", "monthly_income", ""),
)

APR_QUESTIONS: Sequence[Tuple[str, str]] = (
    ("Write about yourself and your future:", "about_self_and_future"),
    ("Write a brief description about your home in the village and surroundings:", "home_description"),
    ("Give a short description of your school and of the study environment:", "school_description"),
    ("What interesting story/experience has happened in your life/family?", "interesting_story"),
)

APR_TEACHER_PROMPT = "Teacher's remarks about the child:"

CHP_SPLIT_ROWS: Sequence[Tuple[FieldSpec, FieldSpec]] = (
    (("Code / Aid No", "aid_no", ""), ("Donor Agency", "donor_agency", "")),
    (("Sponsorship Category", "sponsorship_category", ""), ("Aim in Life", "aim_in_life", "")),
    (("Date of Birth", "dob", ""), ("Birth Place", "birth_place", "")),
    (("Gender", "gender", ""), ("Grade", "grade", "")),
    (("Height", "height", " cm"), ("Weight", "weight", " kg")),
    (("Language Known", "language_known", ""), ("Hobby", "hobby", "")),
)

CHP_PARENT_LINES: Sequence[FieldSpec] = (
    ("Father's Name", "fathers_name", ""),
    ("Mother's Name", "mothers_name", ""),
    ("Literacy of Father", "father_literacy", ""),
    ("Literacy of Mother", "mother_literacy", ""),
)


def with_unit(value: str, unit: str) -> str:
    """Append a unit suffix only to non-empty values."""
    if not value or not unit:
        return value or ""
    return f"{value}{unit}"


def _field_value(record, spec: FieldSpec) -> str:
    _, attr, unit = spec
    return with_unit(getattr(record, attr), unit)


def new_document() -> DocxDocument:
    doc = Document()
    section = doc.sections[0]
    section.page_width = PAGE_WIDTH
    section.page_height = PAGE_HEIGHT
    section.top_margin = MARGIN_TOP_BOTTOM
    section.bottom_margin = MARGIN_TOP_BOTTOM
    section.left_margin = MARGIN_LEFT_RIGHT
    section.right_margin = MARGIN_LEFT_RIGHT
    return doc


def _field_column(container: Container, record, specs: Sequence[FieldSpec]) -> None:
    for spec in specs:
        field_line(container, spec[0], _field_value(record, spec))


def _siblings_line(container: Container, sisters: str, brothers: str) -> None:
    p = container.add_paragraph()
    styled_run(p, "Siblings: ", bold=True)
    styled_run(p, "S- ")
    styled_run(p, sisters or "_")
    styled_run(p, " , B- ")
    styled_run(p, brothers or "_")
    p.paragraph_format.space_after = FIELD_GAP


def build_apr(record: AprRecord, image_bytes: bytes) -> DocxDocument:
    doc = new_document()

    header_block(doc, image_bytes)
    title_line(doc, APR_TITLE, after=Twips(200))

    school = label_value(doc.add_paragraph(), "Name of School", record.school_name, bold_value=True)
    school.paragraph_format.space_after = Twips(200)

    # Left data | middle data | picture box
    grid = borderless_table(doc, (37, 37, 26))
    left, middle, picture = grid.rows[0].cells
    _field_column(left, record, APR_LEFT_COLUMN)
    _field_column(middle, record, APR_MIDDLE_COLUMN)
    placeholder_box(picture, APR_BOX_HEIGHT, "Picture")
    close_cells(grid)

    spacer(doc, Twips(200))
    for prompt, attr in APR_QUESTIONS:
        question_block(doc, prompt, getattr(record, attr))
    spacer(doc, Twips(200))
    question_block(doc, APR_TEACHER_PROMPT, record.teachers_remarks)
    spacer(doc, Twips(600))

    preparer_footer(doc, "Prepared By", record.prepared_by, record.prepared_date)
    return doc


def build_chp(record: ChpRecord, image_bytes: bytes) -> DocxDocument:
    doc = new_document()

    header_block(doc, image_bytes)
    title_line(doc, CHP_TITLE, after=Twips(300))

    # Info (70%) | profile picture (30%)
    grid = borderless_table(doc, (70, 30))
    info, picture = grid.rows[0].cells

    field_line(info, "Name of Child", record.child_name)
    field_line(info, "Name of School", record.school_name)
    for first, second in CHP_SPLIT_ROWS:
        split_row(info, first[0], _field_value(record, first), second[0], _field_value(record, second))
    _field_column(info, record, CHP_PARENT_LINES)
    _siblings_line(info, record.siblings_sisters, record.siblings_brothers)
    split_row(info, "Family Income Source", record.family_income_source, "Monthly Income (BDT)", record.monthly_income)

    placeholder_box(picture, CHP_BOX_HEIGHT, "Profile Picture")
    close_cells(grid)

    spacer(doc, Twips(300))
    question_block(doc, "Child Profile:", record.child_profile)
    question_block(doc, "Family Background:", record.family_background)
    spacer(doc, Twips(800))

    preparer_footer(doc, "Prepared By (Name)", record.prepared_by, record.prepared_date)
    return doc
