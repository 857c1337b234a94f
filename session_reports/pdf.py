from __future__ import annotations  # Styled PDF rendering for coaching reports

from datetime import datetime
from typing import Any, List, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .models import CoachingReport, QuestionFeedback

DEJAVU_SANS = "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"  # System font
DEJAVU_SANS_BOLD = "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background

TAG_LABELS = {  # Display text for coaching tags
    "specific": "Specific",
    "vague": "Vague",
    "unclear": "Unclear",
    "high_impact": "High impact",
    "medium_impact": "Medium impact",
    "low_impact": "Low impact",
    "clear": "Clear",
    "rambling": "Rambling",
    "incomplete": "Incomplete",
}


def _parse_datetime(value: str | None) -> datetime | None:  # Parse ISO timestamp safely
    if not value:
        return None
    try:
        normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(normalized)
    except ValueError:
        return None


def _format_datetime(value: datetime | None) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_value(value: float | None) -> str:  # Format score for display
    if value is None:
        return "N/A"
    return f"{float(value):.2f}/5"


def _calc_text_height(pdf: FPDF, width: float, text: str, line_height: float) -> float:  # Estimate multi-cell height
    if not text:
        return line_height
    lines = pdf.multi_cell(width, line_height, text, dry_run=True, output="LINES")
    return line_height * max(1, len(lines))


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Practice Session Coaching Report"
        self._font_regular = "Helvetica"
        self._font_bold = "Helvetica"
        self._supports_unicode = False

    def _prepare_text(self, text: Any) -> str:  # Sanitize text for non-unicode fonts
        value = "" if text is None else str(text)
        if self._supports_unicode:
            return value
        cleaned = value.replace("•", "-").replace("…", "...").replace("’", "'")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, *args, **kwargs):  # Wrap base cell with text sanitisation
        args_list = list(args)
        if len(args_list) >= 3:
            args_list[2] = self._prepare_text(args_list[2])
        elif "text" in kwargs:
            kwargs["text"] = self._prepare_text(kwargs["text"])
        return super().cell(*args_list, **kwargs)

    def multi_cell(self, *args, **kwargs):  # Wrap base multi_cell with text sanitisation
        args_list = list(args)
        if len(args_list) >= 3:
            args_list[2] = self._prepare_text(args_list[2])
        elif "text" in kwargs:
            kwargs["text"] = self._prepare_text(kwargs["text"])
        return super().multi_cell(*args_list, **kwargs)

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            line_height = 8
            self.set_font(self._font_bold, "B", 16)
            lines = len(self.multi_cell(usable, line_height, self.header_title, dry_run=True, output="LINES"))
            banner = 6 + max(1, lines) * line_height + 4
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, banner, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.multi_cell(usable, line_height, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.ln(4)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self._font_bold, "B", 12)
            self.multi_cell(usable, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self._font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _paragraph(pdf: ReportPDF, text: str, *, size: int = 11, color: Tuple[int, int, int] = TEXT, bold: bool = False) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_text_color(*color)
    if bold:
        pdf.set_font(pdf._font_bold, "B", size)
    else:
        pdf.set_font(pdf._font_regular, "", size)
    pdf.multi_cell(_effective_width(pdf), 6, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(*TEXT)


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf._font_bold, "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf._font_regular, "", 10)
        pdf.cell(col, line, left[0], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[0], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf._font_bold, "B", 11)
        pdf.cell(col, line, left[1], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[1], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_overall(pdf: ReportPDF, report: CoachingReport) -> None:  # Highlight the session aggregate
    width = _effective_width(pdf)
    top = pdf.get_y()
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, top, width, 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf._font_regular, "", 10)
    pdf.cell(width - 12, 6, "Overall STAR Average")
    pdf.set_xy(pdf.l_margin, top + 4)
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf._font_bold, "B", 14)
    pdf.cell(width - 6, 8, _score_value(report.avg_score), align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _render_summary(pdf: ReportPDF, report: CoachingReport) -> None:  # Strengths and clarifications bullets
    bullet = "•" if pdf._supports_unicode else "-"
    _section_title(pdf, "Strengths")
    if not report.strengths:
        _paragraph(pdf, "No strengths were identified for this session.", color=MUTED)
    for strength in report.strengths:
        _paragraph(pdf, f"{bullet} {strength.text}", bold=True)
        _paragraph(pdf, strength.evidence, size=10, color=MUTED)
    pdf.ln(2)

    _section_title(pdf, "Suggested Clarifications")
    if not report.clarifications:
        _paragraph(pdf, "No clarifications suggested.", color=MUTED)
    for item in report.clarifications:
        _paragraph(pdf, f"{bullet} {item.suggestion}", bold=True)
        _paragraph(pdf, item.rationale, size=10, color=MUTED)
    pdf.ln(2)


def _score_table(pdf: ReportPDF, feedback: QuestionFeedback) -> None:  # STAR scores row for one question
    headers = ["Situation", "Task", "Action", "Result", "Average"]
    values = [
        str(feedback.scores.situation),
        str(feedback.scores.task),
        str(feedback.scores.action),
        str(feedback.scores.result),
        _score_value(feedback.average),
    ]
    width = _effective_width(pdf) / len(headers)
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf._font_bold, "B", 10)
    for title in headers:
        pdf.cell(width, 7, title, align="C", fill=True)
    pdf.ln(7)
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(247, 250, 255)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf._font_regular, "", 10)
    for value in values:
        pdf.cell(width, 7, value, align="C", fill=True)
    pdf.ln(9)


def _render_question(pdf: ReportPDF, feedback: QuestionFeedback) -> None:  # Narrative block for one question
    estimate = (
        _calc_text_height(pdf, _effective_width(pdf), feedback.question_text, 6)
        + _calc_text_height(pdf, _effective_width(pdf), feedback.narrative, 6)
        + 30
    )
    if pdf.get_y() + estimate > pdf.page_break_trigger:
        pdf.add_page()
    _paragraph(pdf, f"Q{feedback.question_order}. {feedback.question_text}", color=ACCENT, bold=True)
    tags = ", ".join(
        TAG_LABELS.get(tag, tag)
        for tag in (feedback.scores.specificity_tag, feedback.scores.impact_tag, feedback.scores.clarity_tag)
    )
    _paragraph(pdf, f"{feedback.label} | {tags}", size=10, color=MUTED)
    _score_table(pdf, feedback)
    _paragraph(pdf, feedback.narrative, size=10)
    if feedback.missing_elements:
        _paragraph(pdf, "Missing: " + ", ".join(feedback.missing_elements), size=10, color=MUTED)
    if feedback.follow_up:
        _paragraph(pdf, f"Try next: {feedback.follow_up}", size=10, color=MUTED)
    pdf.ln(1)
    _paragraph(pdf, "Example answer", size=10, bold=True)
    _paragraph(pdf, feedback.example_answer, size=10, color=MUTED)
    y = pdf.get_y() + 2
    pdf.set_draw_color(*RULE)
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.set_y(y + 4)


def generate_coaching_report_pdf(report: CoachingReport) -> bytes:  # Build PDF payload for a coaching report
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    try:
        pdf.add_font("DejaVu", "", DEJAVU_SANS)
        pdf.add_font("DejaVu", "B", DEJAVU_SANS_BOLD)
        pdf._font_regular = "DejaVu"
        pdf._font_bold = "DejaVu"
        pdf._supports_unicode = True
    except OSError:  # System fonts are optional
        pdf._font_regular = "Helvetica"
        pdf._font_bold = "Helvetica"
        pdf._supports_unicode = False
    if report.low_anxiety_enabled:
        pdf.header_title = "Practice Session Coaching Report (Low-Anxiety Mode)"
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Report ID", report.id),
            ("Session ID", report.session_id),
            ("Created", _format_datetime(_parse_datetime(report.created_at))),
            ("Updated", _format_datetime(_parse_datetime(report.updated_at))),
            ("Questions Scored", str(len(report.per_question_feedback))),
            ("Low-Anxiety Mode", "On" if report.low_anxiety_enabled else "Off"),
        ],
    )
    _render_overall(pdf, report)
    _render_summary(pdf, report)

    _section_title(pdf, "Question Feedback")
    if not report.per_question_feedback:
        _paragraph(pdf, "No per-question feedback recorded for this session.", color=MUTED)
    for feedback in report.per_question_feedback:
        _render_question(pdf, feedback)

    return bytes(pdf.output())


__all__ = ["ReportPDF", "generate_coaching_report_pdf"]
