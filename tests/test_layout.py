from docx import Document
from docx.enum.table import WD_ROW_HEIGHT_RULE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from docx.shared import Twips

from sponsorship_reports.docgen.assets import fallback_image_bytes
from sponsorship_reports.docgen.layout import (
    FIELD_GAP,
    ORG_NAME,
    QUESTION_GAP,
    borderless_table,
    field_line,
    header_block,
    placeholder_box,
    question_block,
    split_row,
)


def test_field_line_with_empty_value_keeps_label():
    doc = Document()
    p = field_line(doc, "Grade", "")
    assert p.text == "Grade: "
    assert len(p.runs) == 2
    assert p.runs[0].bold is True
    assert p.paragraph_format.space_after == FIELD_GAP


def test_split_row_renders_two_halves():
    doc = Document()
    table = split_row(doc, "Gender", "Female", "Grade", "3")
    left, right = table.rows[0].cells
    assert [p.text for p in left.paragraphs] == ["Gender: Female"]
    assert [p.text for p in right.paragraphs] == ["Grade: 3"]


def test_borderless_table_has_no_visible_borders():
    doc = Document()
    table = borderless_table(doc, (37, 37, 26))
    borders = table._tbl.tblPr.find(qn("w:tblBorders"))
    assert borders is not None
    assert {el.get(qn("w:val")) for el in borders} == {"none"}
    assert all(not cell.paragraphs for cell in table.rows[0].cells)


def test_question_block_is_justified():
    doc = Document()
    p = question_block(doc, "Child Profile:", "Lives with grandmother.")
    assert p.text == "Child Profile: Lives with grandmother."
    assert p.alignment == WD_ALIGN_PARAGRAPH.JUSTIFY
    assert p.paragraph_format.space_after == QUESTION_GAP


def test_header_block_embeds_logo_and_org_name():
    doc = Document()
    table = header_block(doc, fallback_image_bytes())
    assert table.cell(0, 1).paragraphs[0].text == ORG_NAME
    assert len(doc.inline_shapes) == 1


def test_placeholder_box_is_bordered_and_captioned():
    doc = Document()
    grid = borderless_table(doc, (70, 30))
    cell = grid.cell(0, 1)
    box = placeholder_box(cell, Twips(4500), "Profile Picture")

    row = box.rows[0]
    assert row.height == Twips(4500)
    assert row.height_rule == WD_ROW_HEIGHT_RULE.EXACTLY
    assert box.cell(0, 0).text == ""
    tc_borders = box.cell(0, 0)._tc.tcPr.find(qn("w:tcBorders"))
    assert tc_borders.find(qn("w:top")).get(qn("w:val")) == "single"

    caption = cell.paragraphs[-1]
    assert caption.text == "Profile Picture"
    assert caption.alignment == WD_ALIGN_PARAGRAPH.CENTER
