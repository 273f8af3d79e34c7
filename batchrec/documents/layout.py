"""
Shared ReportLab layout: the Document value, styles, table helpers and the
header/footer painter.

Renderers only build a Document; ``to_pdf_bytes`` is the one place that
turns it into PDF bytes.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Table, TableStyle, Spacer, KeepTogether

from batchrec.core.config import COMPANY_NAME, COMPANY_ADDRESS
from batchrec.core.errors import RenderError
from batchrec.domain.dates import display

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
HEADER_HEIGHT = 32 * mm

GRID = colors.black
HEADER_FILL = colors.HexColor("#f0f0f0")
LABEL_FILL = colors.HexColor("#f9f9f9")


@dataclass(frozen=True)
class HeaderInfo:
    title: str
    doc_no: str
    rev_no: str
    issue_no: str
    page_label: str = "Page No: {page} of {total}"
    footer_right: str | None = None
    border: bool = False


@dataclass
class Document:
    title: str
    filename: str
    story: list[Any] = field(default_factory=list)
    header: HeaderInfo | None = None

    def texts(self) -> list[str]:
        """Plain text of every paragraph and table cell, in story order."""
        out: list[str] = []
        for flowable in self.story:
            _collect_text(flowable, out)
        return out


def _collect_text(flowable, out: list[str]) -> None:
    if isinstance(flowable, Paragraph):
        out.append(flowable.getPlainText())
    elif isinstance(flowable, Table):
        for row in flowable._cellvalues:
            for cell in row:
                if isinstance(cell, (list, tuple)):
                    for item in cell:
                        _collect_text(item, out)
                else:
                    _collect_text(cell, out)
    elif isinstance(flowable, KeepTogether):
        for item in flowable._content:
            _collect_text(item, out)


def _build_styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(name="Cell", parent=styles["Normal"], fontSize=8, leading=10))
    styles.add(ParagraphStyle(name="CellBold", parent=styles["Cell"], fontName="Helvetica-Bold"))
    styles.add(ParagraphStyle(name="CellCenter", parent=styles["Cell"], alignment=TA_CENTER))
    styles.add(ParagraphStyle(
        name="SectionTitle",
        parent=styles["Normal"],
        fontName="Helvetica-Bold",
        fontSize=10,
        spaceBefore=8,
        spaceAfter=4,
    ))
    styles.add(ParagraphStyle(
        name="SlipTitle",
        parent=styles["Title"],
        fontSize=14,
        spaceBefore=6,
        spaceAfter=10,
    ))
    styles.add(ParagraphStyle(name="Body", parent=styles["Normal"], fontSize=9, leading=12))
    styles.add(ParagraphStyle(name="BodyItalic", parent=styles["Body"], fontName="Helvetica-Oblique"))
    return styles


STYLES = _build_styles()


# ---- flowable helpers ----

def text(value, style: str = "Cell") -> Paragraph:
    return Paragraph(escape(display(value)), STYLES[style])


def section(title: str) -> Paragraph:
    return Paragraph(escape(title), STYLES["SectionTitle"])


def grid_table(
    rows: Sequence[Sequence[Any]],
    widths: Sequence[float],
    header: bool = True,
    label_cols: Sequence[int] = (),
) -> Table:
    """Bordered table; ``widths`` are fractions of the content width."""
    cells = [[c if isinstance(c, Paragraph) else text(c, "CellBold" if header and r == 0 else "Cell")
              for c in row] for r, row in enumerate(rows)]
    table = Table(cells, colWidths=[w * CONTENT_WIDTH for w in widths], repeatRows=1 if header else 0)
    commands = [
        ("GRID", (0, 0), (-1, -1), 0.5, GRID),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]
    if header:
        commands.append(("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL))
    for col in label_cols:
        commands.append(("BACKGROUND", (col, 0), (col, -1), LABEL_FILL))
    table.setStyle(TableStyle(commands))
    return table


def label_value_table(pairs: Sequence[tuple[str, Any]], per_row: int = 2) -> Table:
    """Label/value grid, ``per_row`` pairs across."""
    rows = []
    for i in range(0, len(pairs), per_row):
        row: list[Any] = []
        for label, value in pairs[i:i + per_row]:
            row.extend([text(label, "CellBold"), text(value)])
        while len(row) < per_row * 2:
            row.extend(["", ""])
        rows.append(row)
    width = 1.0 / (per_row * 2)
    return grid_table(rows, [width] * (per_row * 2), header=False, label_cols=range(0, per_row * 2, 2))


def spacer(height: float = 4 * mm) -> Spacer:
    return Spacer(1, height)


def signature_row(labels: Sequence[str], captions: Sequence[str] | None = None) -> Table:
    captions = captions or [""] * len(labels)
    cells = [[Paragraph(f"<b>{escape(label)}</b><br/>{escape(caption)}", STYLES["CellCenter"])
              for label, caption in zip(labels, captions)]]
    width = CONTENT_WIDTH / len(labels)
    table = Table(cells, colWidths=[width] * len(labels))
    table.setStyle(TableStyle([
        ("LINEABOVE", (i, 0), (i, 0), 0.75, GRID) for i in range(len(labels))
    ] + [("TOPPADDING", (0, 0), (-1, -1), 4), ("LEFTPADDING", (0, 0), (-1, -1), 10),
         ("RIGHTPADDING", (0, 0), (-1, -1), 10)]))
    return table


def slip_header(format_ref: str, rev_no: str = "00") -> Table:
    """Company banner with the slip's format reference, drawn in the story."""
    cells = [[
        Paragraph(f"<b>{escape(COMPANY_NAME.upper())}</b>", STYLES["Body"]),
        Paragraph(f"Format Ref. No. : {escape(format_ref)}<br/>Rev. No. : {escape(rev_no)}", STYLES["Cell"]),
    ]]
    table = Table(cells, colWidths=[0.65 * CONTENT_WIDTH, 0.35 * CONTENT_WIDTH])
    table.setStyle(TableStyle([
        ("LINEBELOW", (0, 0), (-1, 0), 1, GRID),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    return table


# ---- page decoration ----

def _draw_header(c: canvas.Canvas, header: HeaderInfo, page: int, total: int) -> None:
    top = PAGE_HEIGHT - MARGIN
    left = MARGIN
    right = PAGE_WIDTH - MARGIN
    box_bottom = top - HEADER_HEIGHT + 4 * mm
    details_left = right - 60 * mm

    c.saveState()
    if header.border:
        c.setLineWidth(1.5)
        c.rect(MARGIN / 2, MARGIN / 2, PAGE_WIDTH - MARGIN, PAGE_HEIGHT - MARGIN)

    c.setLineWidth(0.75)
    c.rect(left, box_bottom, right - left, top - box_bottom)
    c.line(details_left, box_bottom, details_left, top)

    centre = (left + details_left) / 2
    c.setFont("Helvetica-Bold", 13)
    c.drawCentredString(centre, top - 9 * mm, header.title)
    c.setFont("Helvetica-Bold", 10)
    c.drawCentredString(centre, top - 15 * mm, COMPANY_NAME)
    c.setFont("Helvetica", 7)
    c.drawCentredString(centre, top - 20 * mm, COMPANY_ADDRESS)

    lines = [
        ("Doc No:", header.doc_no),
        ("Rev No:", header.rev_no),
        ("Issue No:", header.issue_no),
        ("", header.page_label.format(page=page, total=total)),
    ]
    row_height = (top - box_bottom) / len(lines)
    for i, (label, value) in enumerate(lines):
        y = top - (i + 1) * row_height
        if i:
            c.line(details_left, y + row_height, right, y + row_height)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(details_left + 2 * mm, y + 2 * mm, label)
        c.setFont("Helvetica", 8)
        c.drawString(details_left + (16 * mm if label else 2 * mm), y + 2 * mm, value)

    c.setFont("Helvetica", 7)
    c.drawString(left, MARGIN - 6 * mm, COMPANY_NAME)
    c.drawRightString(right, MARGIN - 6 * mm, header.footer_right or header.doc_no)
    c.restoreState()


def _canvas_for(header: HeaderInfo | None):
    class NumberedCanvas(canvas.Canvas):
        """Defers page decoration until the page count is known."""

        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states: list[dict] = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                if header is not None:
                    _draw_header(self, header, self._pageNumber, total)
                super().showPage()
            super().save()

    return NumberedCanvas


def to_pdf_bytes(document: Document) -> bytes:
    buf = io.BytesIO()
    top = MARGIN + (HEADER_HEIGHT if document.header is not None else 0)
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=top,
        bottomMargin=MARGIN + 4 * mm,
        title=document.title,
    )
    try:
        doc.build(list(document.story), canvasmaker=_canvas_for(document.header))
    except Exception as e:
        logger.exception("building %s failed", document.filename)
        raise RenderError(f"Could not build {document.filename}: {e}") from e
    return buf.getvalue()
