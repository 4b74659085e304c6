"""fpdf2 rendering of the HR interview report."""
from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from sessions import Evaluation, Session


FONT_DIR = "/usr/share/fonts/truetype/dejavu"
UNICODE_FONTS = {"": "DejaVuSans.ttf", "B": "DejaVuSans-Bold.ttf"}

BRAND = (45, 115, 245)
INK = (34, 34, 34)
SUBTLE = (100, 100, 100)
DIVIDER = (230, 230, 230)
STRIPE = (247, 250, 255)

PLACEHOLDER = "-"
LATIN1_SUBSTITUTES = {"•": "-", "–": "-", "—": "-", "‘": "'", "’": "'", "“": '"', "”": '"'}

NEXT_LINE = {"new_x": XPos.LMARGIN, "new_y": YPos.NEXT}
SAME_LINE = {"new_x": XPos.RIGHT, "new_y": YPos.TOP}


class ReportRenderer(Protocol):  # Turns an evaluation into a document payload
    def __call__(
        self,
        session: Session,
        evaluation: Evaluation,
        transcript: str,
        generated_at: datetime,
    ) -> bytes: ...


def _when(value: Optional[datetime]) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value.day} {value:%b %Y}, {value.hour % 12 or 12}:{value:%M %p}"


def _score(value: Optional[float]) -> str:
    return PLACEHOLDER if value is None else f"{float(value):g}"


class ReportPDF(FPDF):
    """FPDF with a branded first-page banner, running header and page footer.

    Falls back to the core Helvetica font (latin-1 only) when the DejaVu TTFs
    are not installed; text is then transliterated before it is drawn.
    """

    title_text = "Interview Evaluation Report"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.body_family = "Helvetica"
        self.has_unicode = False

    def load_unicode_font(self) -> None:
        paths = {style: os.path.join(FONT_DIR, name) for style, name in UNICODE_FONTS.items()}
        if not all(os.path.exists(path) for path in paths.values()):
            return
        for style, path in paths.items():
            self.add_font("DejaVu", style, path)
        self.body_family = "DejaVu"
        self.has_unicode = True

    def use_font(self, size: float, *, bold: bool = False) -> None:
        self.set_font(self.body_family, "B" if bold else "", size)

    def _printable(self, text: Any) -> str:
        value = "" if text is None else str(text)
        if self.has_unicode:
            return value
        for char, substitute in LATIN1_SUBSTITUTES.items():
            value = value.replace(char, substitute)
        return value.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args, **kwargs):
        return super().cell(w, h, self._printable(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args, **kwargs):
        return super().multi_cell(w, h, self._printable(text), *args, **kwargs)

    def header(self) -> None:
        if self.page_no() == 1:
            self.set_fill_color(*BRAND)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.use_font(16, bold=True)
            self.cell(self.epw, 8, self.title_text, **NEXT_LINE)
            self.ln(8)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.use_font(11, bold=True)
            self.cell(self.epw, 6, self.title_text, **NEXT_LINE)
            rule_y = self.get_y() + 1
            self.set_draw_color(*BRAND)
            self.set_line_width(0.4)
            self.line(self.l_margin, rule_y, self.w - self.r_margin, rule_y)
            self.ln(4)
        self.set_text_color(*INK)

    def footer(self) -> None:
        self.set_y(-12)
        self.set_draw_color(*DIVIDER)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.use_font(9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _heading(pdf: ReportPDF, title: str) -> None:
    pdf.set_text_color(*INK)
    pdf.set_x(pdf.l_margin)
    pdf.use_font(13, bold=True)
    pdf.cell(0, 9, title, **NEXT_LINE)
    pdf.set_draw_color(*DIVIDER)
    pdf.set_line_width(0.2)
    pdf.line(pdf.l_margin, pdf.get_y(), pdf.l_margin + pdf.epw, pdf.get_y())
    pdf.ln(2)


def _text(pdf: ReportPDF, body: str, *, muted: bool = False, size: int = 11) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*(SUBTLE if muted else INK))
    pdf.use_font(size)
    pdf.multi_cell(pdf.epw, 6, body or PLACEHOLDER, **NEXT_LINE)
    pdf.set_text_color(*INK)
    pdf.ln(2)


def _bullet_list(pdf: ReportPDF, items: Sequence[str], *, empty: str = PLACEHOLDER) -> None:
    if not items:
        _text(pdf, empty, muted=True)
        return
    marker = "•" if pdf.has_unicode else "-"
    pdf.use_font(11)
    for item in items:
        pdf.set_x(pdf.l_margin)
        pdf.multi_cell(pdf.epw, 6, f"{marker} {item}", **NEXT_LINE)
    pdf.ln(2)


def _meta_grid(pdf: ReportPDF, fields: List[Tuple[str, str]]) -> None:  # Label/value pairs, two per row
    half = pdf.epw / 2.0
    for start in range(0, len(fields), 2):
        pair = fields[start : start + 2]
        if len(pair) == 1:
            pair.append(("", ""))
        for index, bold, colour, size in ((0, False, SUBTLE, 10), (1, True, INK, 11)):
            pdf.set_x(pdf.l_margin)
            pdf.set_text_color(*colour)
            pdf.use_font(size, bold=bold)
            pdf.cell(half, 6, pair[0][index], **SAME_LINE)
            pdf.cell(half, 6, pair[1][index], **NEXT_LINE)
    pdf.ln(2)


def _score_table(pdf: ReportPDF, evaluation: Evaluation) -> None:
    scores = evaluation.scores
    if scores is None:
        return
    _heading(pdf, "Scores (1-5)")
    rows: Dict[str, Optional[float]] = {
        "Communication": scores.communication,
        "Professionalism": scores.professionalism,
        "Role Fit": scores.role_fit,
        "Seniority": scores.seniority,
        "Overall": scores.overall,
    }
    label_w = pdf.epw * 0.7
    pdf.use_font(10)
    pdf.set_fill_color(*STRIPE)
    for row, (label, value) in enumerate(rows.items()):
        striped = row % 2 == 0
        pdf.set_x(pdf.l_margin)
        pdf.cell(label_w, 7, label, fill=striped, **SAME_LINE)
        pdf.cell(pdf.epw - label_w, 7, _score(value), align="R", fill=striped, **NEXT_LINE)
    pdf.ln(2)


def behavior_flag_labels(evaluation: Evaluation) -> List[str]:
    flags = evaluation.flags
    if flags is None:
        return []
    labels = [
        (flags.fixated_on_compensation, "Fixated on compensation"),
        (flags.rude_or_confrontational, "Rude or confrontational tone"),
        (flags.evasiveness_or_lack_of_detail, "Evasive / lack of detail"),
    ]
    return [label for raised, label in labels if raised]


def render_report_pdf(
    session: Session,
    evaluation: Evaluation,
    transcript: str,
    generated_at: datetime,
) -> bytes:
    """Render the HR report and return the PDF document bytes."""

    pdf = ReportPDF()
    pdf.load_unicode_font()
    pdf.alias_nb_pages()
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _meta_grid(
        pdf,
        [
            ("Candidate", session.candidate_name or "N/A"),
            ("Position", session.role or "N/A"),
            ("Company", session.company_name or "N/A"),
            ("Generated", _when(generated_at)),
        ],
    )

    _heading(pdf, "Summary")
    _text(pdf, evaluation.summary)

    _heading(pdf, "Strengths")
    _bullet_list(pdf, evaluation.strengths)

    _heading(pdf, "Weaknesses")
    _bullet_list(pdf, evaluation.weaknesses)

    _score_table(pdf, evaluation)

    if evaluation.flags is not None:
        _heading(pdf, "Behavioral Flags")
        _bullet_list(pdf, behavior_flag_labels(evaluation), empty="None observed.")

    _heading(pdf, "Recommendation")
    _text(pdf, evaluation.recommendation)

    _heading(pdf, "Transcript")
    _text(pdf, transcript, size=10)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "ReportRenderer", "behavior_flag_labels", "render_report_pdf"]
