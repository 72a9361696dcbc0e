from io import BytesIO
from datetime import datetime, timezone
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from resume_reviewer.core import CATEGORY_LABELS, REQUIRED_SCORES
from resume_reviewer.models import AnalysisResult
from resume_reviewer.services.animation import as_number

PAGE_BG = colors.HexColor("#0F172A")
PANEL = colors.HexColor("#1E293B")
INK = colors.HexColor("#F1F5F9")
SOFT_INK = colors.HexColor("#94A3B8")
GRID = colors.HexColor("#334155")
HIGH = colors.HexColor("#22C55E")
MID = colors.HexColor("#F59E0B")
LOW = colors.HexColor("#EF4444")
PLACEHOLDER = "n/a"


def _text(value) -> str:
    return escape("" if value is None else str(value))


def _items(values) -> list:
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values] if values else []


def score_color(value) -> colors.Color:
    """Band a 0-100 score: 75+ is strong, 50-74 middling, below 50 weak."""
    n = as_number(value)
    if n >= 75:
        return HIGH
    if n >= 50:
        return MID
    return LOW


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReviewTitle", parent=base["Title"], fontName="Helvetica-Bold",
            fontSize=22, textColor=INK, spaceAfter=6,
        ),
        "heading": ParagraphStyle(
            "ReviewHeading", parent=base["Heading2"], fontName="Helvetica-Bold",
            fontSize=13, textColor=INK, spaceBefore=12, spaceAfter=6,
        ),
        "body": ParagraphStyle(
            "ReviewBody", parent=base["BodyText"], fontName="Helvetica",
            fontSize=10, textColor=SOFT_INK, leading=14,
        ),
    }


def _score_table(analysis: AnalysisResult) -> Table:
    scores = analysis.get("scores") or {}
    rows = [["Category", "Score"], ["Overall", f"{_text(analysis.get('score_overall'))}/100"]]
    bands = [score_color(analysis.get("score_overall"))]
    for key in REQUIRED_SCORES:
        rows.append([CATEGORY_LABELS[key], f"{_text(scores.get(key))}/100"])
        bands.append(score_color(scores.get(key)))

    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), PANEL),
        ("TEXTCOLOR", (0, 0), (-1, -1), INK),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, 1), "Helvetica-Bold"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.5, GRID),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]
    for row, band in enumerate(bands, start=1):
        commands.append(("TEXTCOLOR", (1, row), (1, row), band))

    table = Table(rows, colWidths=[340, 170])
    table.setStyle(TableStyle(commands))
    return table


def _marked_list(story: list, items, mark: str, color: colors.Color, body: ParagraphStyle) -> None:
    entries = _items(items)
    if not entries:
        story.append(Paragraph(PLACEHOLDER, body))
        return
    for item in entries:
        story.append(Paragraph(f"<font color='{color.hexval()}'>{mark}</font> {_text(item)}", body))


def _bullet_table(bullets: list, body: ParagraphStyle) -> Table:
    rows = [["Before", "After"]]
    for b in bullets:
        rows.append([Paragraph(_text(b.get("original")), body), Paragraph(_text(b.get("improved")), body)])
    table = Table(rows, colWidths=[255, 255], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), PANEL),
                ("TEXTCOLOR", (0, 0), (0, 0), LOW),
                ("TEXTCOLOR", (1, 0), (1, 0), HIGH),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("BOX", (0, 0), (-1, -1), 0.5, GRID),
                ("INNERGRID", (0, 0), (-1, -1), 0.5, GRID),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 7),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 7),
            ]
        )
    )
    return table


def _paint_background(canvas, _doc):
    canvas.saveState()
    canvas.setFillColor(PAGE_BG)
    canvas.rect(0, 0, A4[0], A4[1], fill=1, stroke=0)
    canvas.restoreState()


def build_pdf(analysis: AnalysisResult) -> bytes:
    """Render a finished review as a printable PDF."""
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
        title="Resume Review",
        author="AI Resume Reviewer",
    )
    st = _styles()
    body = st["body"]

    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    story = [
        Paragraph("Resume Review", st["title"]),
        Paragraph(f"Reviewed {stamp}", body),
        Paragraph(f"Interview probability: {_text(analysis.get('interview_probability'))}", body),
        Spacer(1, 12),
        _score_table(analysis),
        Paragraph("Recruiter's Take", st["heading"]),
        Paragraph(_text(analysis.get("recruiter_summary")) or PLACEHOLDER, body),
        Paragraph("Top Strengths", st["heading"]),
    ]
    _marked_list(story, analysis.get("top_strengths"), "+", HIGH, body)
    story.append(Paragraph("Critical Weaknesses", st["heading"]))
    _marked_list(story, analysis.get("critical_weaknesses"), "-", LOW, body)

    bullets = [b for b in _items(analysis.get("rewritten_bullets")) if isinstance(b, dict)]
    if bullets:
        story.append(Paragraph("Bullet Point Improvements", st["heading"]))
        story.append(_bullet_table(bullets, body))

    doc.build(story, onFirstPage=_paint_background, onLaterPages=_paint_background)
    return buf.getvalue()
