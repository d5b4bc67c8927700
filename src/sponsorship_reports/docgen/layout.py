from __future__ import annotations

from io import BytesIO
from typing import Sequence, Union

from docx.document import Document as DocxDocument
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT, WD_ROW_HEIGHT_RULE
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Length, Pt, RGBColor, Twips
from docx.table import Table, _Cell
from docx.text.paragraph import Paragraph
from docx.text.run import Run

ORG_NAME = "Adventist Development and Relief Agency Bangladesh"

FONT_HEADER = "Arial"
FONT_BODY = "Arial Narrow"
BODY_SIZE = Pt(11)
CAPTION_SIZE = Pt(10)
ORG_SIZE = Pt(12)
TITLE_SIZE = Pt(14)

FIELD_GAP = Twips(100)
QUESTION_GAP = Twips(200)

EMU_PER_PX = 9525
LOGO_WIDTH = Emu(150 * EMU_PER_PX)
LOGO_HEIGHT = Emu(50 * EMU_PER_PX)

Container = Union[DocxDocument, _Cell]

_TABLE_EDGES = ("top", "left", "bottom", "right", "insideH", "insideV")
_CELL_EDGES = ("top", "left", "bottom", "right")


# ---------------------------------------------------------------------------
# Low-level helpers
# ---------------------------------------------------------------------------

def styled_run(
    paragraph: Paragraph,
    text: str,
    *,
    bold: bool = False,
    font: str = FONT_BODY,
    size: Length = BODY_SIZE,
) -> Run:
    run = paragraph.add_run(text)
    if bold:
        run.bold = True
    run.font.name = font
    run.font.size = size
    return run


def label_value(paragraph: Paragraph, label: str, value: str, *, bold_value: bool = False) -> Paragraph:
    """Append a bold ``"<label>: "`` run followed by the value run."""
    styled_run(paragraph, f"{label}: ", bold=True)
    styled_run(paragraph, value or "", bold=bold_value)
    return paragraph


def available_width(container: Container) -> Length:
    if isinstance(container, _Cell):
        return container.width if container.width is not None else Twips(1440)
    section = container.sections[-1]
    return Emu(section.page_width - section.left_margin - section.right_margin)


def _border_element(tag: str, edges: Sequence[str], val: str, size: int = 0, color: str = "000000"):
    borders = OxmlElement(tag)
    for edge in edges:
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:val"), val)
        if size:
            el.set(qn("w:sz"), str(size))
            el.set(qn("w:space"), "0")
            el.set(qn("w:color"), color)
        borders.append(el)
    return borders


def remove_table_borders(table: Table) -> None:
    tblPr = table._tbl.tblPr
    existing = tblPr.find(qn("w:tblBorders"))
    if existing is not None:
        tblPr.remove(existing)
    borders = _border_element("w:tblBorders", _TABLE_EDGES, "none")
    tblW = tblPr.find(qn("w:tblW"))
    if tblW is not None:
        tblW.addnext(borders)
    else:
        tblPr.insert(0, borders)


def set_cell_borders(cell: _Cell, val: str = "single", size: int = 2, color: str = "000000") -> None:
    tcPr = cell._tc.get_or_add_tcPr()
    existing = tcPr.find(qn("w:tcBorders"))
    if existing is not None:
        tcPr.remove(existing)
    borders = _border_element("w:tcBorders", _CELL_EDGES, val, size=size, color=color)
    tcW = tcPr.find(qn("w:tcW"))
    if tcW is not None:
        tcW.addnext(borders)
    else:
        tcPr.insert(0, borders)


def _full_width(table: Table) -> None:
    tblPr = table._tbl.tblPr
    tblW = tblPr.find(qn("w:tblW"))
    if tblW is None:
        tblW = OxmlElement("w:tblW")
        tblPr.insert(0, tblW)
    # pct widths are fiftieths of a percent
    tblW.set(qn("w:type"), "pct")
    tblW.set(qn("w:w"), "5000")


def _size_columns(table: Table, percents: Sequence[int], total: Length) -> None:
    for i, pct in enumerate(percents):
        width = Emu(int(total * pct / 100))
        column = table.columns[i]
        column.width = width
        for cell in column.cells:
            cell.width = width


def _clear_cell(cell: _Cell) -> None:
    tc = cell._tc
    for child in list(tc):
        if child.tag != qn("w:tcPr"):
            tc.remove(child)


def close_cells(table: Table) -> None:
    """Word requires every cell to end with a paragraph."""
    for row in table.rows:
        for cell in row.cells:
            children = [c for c in cell._tc if c.tag != qn("w:tcPr")]
            if not children or children[-1].tag != qn("w:p"):
                cell.add_paragraph()


def _add_table(container: Container, cols: int) -> Table:
    table = container.add_table(rows=1, cols=cols)
    if isinstance(container, _Cell):
        # _Cell.add_table appends an empty paragraph after the table; content follows instead.
        trailing = table._tbl.getnext()
        if trailing is not None and trailing.tag == qn("w:p"):
            trailing.getparent().remove(trailing)
    return table


def borderless_table(container: Container, percents: Sequence[int]) -> Table:
    """One-row, full-width grid with no visible lines and empty cells.

    Callers fill the cells and then call ``close_cells`` if a cell may end with a table.
    """
    total = available_width(container)
    table = _add_table(container, len(percents))
    table.autofit = False
    _full_width(table)
    _size_columns(table, percents, total)
    remove_table_borders(table)
    for cell in table.rows[0].cells:
        _clear_cell(cell)
    return table


def spacer(container: Container, after: Length) -> Paragraph:
    p = container.add_paragraph()
    p.paragraph_format.space_after = after
    return p


# ---------------------------------------------------------------------------
# Layout primitives
# ---------------------------------------------------------------------------

def field_line(container: Container, label: str, value: str) -> Paragraph:
    p = container.add_paragraph()
    label_value(p, label, value)
    p.paragraph_format.space_after = FIELD_GAP
    return p


def split_row(container: Container, label1: str, value1: str, label2: str, value2: str) -> Table:
    table = borderless_table(container, (50, 50))
    left, right = table.rows[0].cells
    field_line(left, label1, value1)
    field_line(right, label2, value2)
    return table


def question_block(container: Container, question: str, answer: str) -> Paragraph:
    p = container.add_paragraph()
    styled_run(p, f"{question} ", bold=True)
    styled_run(p, answer or "")
    p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
    p.paragraph_format.space_after = QUESTION_GAP
    return p


def header_block(container: Container, image_bytes: bytes, org_name: str = ORG_NAME) -> Table:
    table = borderless_table(container, (20, 80))
    logo_cell, title_cell = table.rows[0].cells

    logo_p = logo_cell.add_paragraph()
    logo_p.add_run().add_picture(BytesIO(image_bytes), width=LOGO_WIDTH, height=LOGO_HEIGHT)

    title_cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.BOTTOM
    title_p = title_cell.add_paragraph()
    styled_run(title_p, org_name, bold=True, font=FONT_HEADER, size=ORG_SIZE)
    title_p.paragraph_format.space_after = FIELD_GAP
    return table


def title_line(container: Container, text: str, after: Length) -> Paragraph:
    p = container.add_paragraph(style="Heading 2")
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.paragraph_format.space_before = Twips(200)
    p.paragraph_format.space_after = after
    run = styled_run(p, text, bold=True, font=FONT_HEADER, size=TITLE_SIZE)
    run.font.color.rgb = RGBColor(0, 0, 0)
    return p


def placeholder_box(cell: _Cell, height: Length, caption: str) -> Table:
    """Empty bordered rectangle of fixed height, captioned underneath."""
    cell.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.TOP
    total = available_width(cell)
    box = _add_table(cell, 1)
    box.autofit = False
    _full_width(box)
    _size_columns(box, (100,), total)
    remove_table_borders(box)

    row = box.rows[0]
    row.height = height
    row.height_rule = WD_ROW_HEIGHT_RULE.EXACTLY
    set_cell_borders(row.cells[0], "single", size=2)

    p = cell.add_paragraph()
    styled_run(p, caption, size=CAPTION_SIZE)
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.paragraph_format.space_before = FIELD_GAP
    return box


def preparer_footer(container: Container, by_label: str, prepared_by: str, prepared_date: str) -> Table:
    table = borderless_table(container, (50, 50))
    left, right = table.rows[0].cells
    label_value(left.add_paragraph(), by_label, prepared_by)
    date_p = label_value(right.add_paragraph(), "Prepared Date", prepared_date)
    date_p.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    return table
