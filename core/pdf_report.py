from datetime import datetime, timezone
from io import BytesIO
from textwrap import wrap
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from models import StartupAnalysis


PAGE_WIDTH, PAGE_HEIGHT = A4

MARGIN_X = 24 * mm
MARGIN_Y = 28 * mm
CONTENT_WIDTH = PAGE_WIDTH - (2 * MARGIN_X)

GRID = 16  # baseline spacing

COLOR_PRIMARY = colors.HexColor("#0F172A")
COLOR_ACCENT = colors.HexColor("#1D4ED8")
COLOR_TEXT = colors.HexColor("#1E293B")
COLOR_MUTED = colors.HexColor("#64748B")
COLOR_BORDER = colors.HexColor("#CBD5E1")

BULLET_GLYPH = "•"
SCORE_RADIUS = 38

SCORE_LABELS = (
    ("market_size", "Market size"),
    ("competition", "Competition"),
    ("feasibility", "Feasibility"),
    ("monetization", "Monetization"),
    ("scalability", "Scalability"),
)


class PdfReportBuilder:
    """Lightweight helper that keeps a single canvas instance alive."""

    def __init__(self, analysis: StartupAnalysis):
        self.analysis = analysis
        self.buffer = BytesIO()
        self.pdf = canvas.Canvas(self.buffer, pagesize=A4)

    # -- spacing helpers -------------------------------------------------
    def _ensure_space(self, y: float, needed: float) -> float:
        if y - needed <= MARGIN_Y:
            self.pdf.showPage()
            self.pdf.setFont("Helvetica", 10)
            return PAGE_HEIGHT - MARGIN_Y
        return y

    def _wrap_lines(self, text: str, width: float, size: int) -> List[str]:
        if not text:
            return []
        max_chars = int(width // (size * 0.51))
        return wrap(text, max_chars)

    def _wrap_text(self, text: str, x: float, y: float, width: float, size: int = 10, line_height: int = GRID) -> float:
        if not text:
            return y

        lines = self._wrap_lines(text, width, size)
        self.pdf.setFont("Helvetica", size)
        self.pdf.setFillColor(COLOR_TEXT)

        for line in lines:
            y = self._ensure_space(y, line_height)
            y -= line_height
            self.pdf.drawString(x, y, line)

        return y

    def _section(self, title: str, y: float) -> float:
        y -= GRID
        y = self._ensure_space(y, GRID * 2)

        self.pdf.setFont("Helvetica-Bold", 13)
        self.pdf.setFillColor(COLOR_PRIMARY)
        self.pdf.drawString(MARGIN_X, y, title.upper())

        self.pdf.setStrokeColor(COLOR_BORDER)
        self.pdf.setLineWidth(0.7)
        self.pdf.line(MARGIN_X, y - 4, PAGE_WIDTH - MARGIN_X, y - 4)

        return y - (GRID + 4)

    def _subtitle(self, title: str, y: float) -> float:
        y = self._ensure_space(y, GRID * 2)
        self.pdf.setFont("Helvetica-Bold", 10)
        self.pdf.setFillColor(COLOR_ACCENT)
        self.pdf.drawString(MARGIN_X, y - GRID, title)
        return y - GRID - 2

    def _bullet_list(self, items, x: float, y: float, width: float) -> float:
        bullet_indent = 12
        items = [item for item in items if item] or ["Nothing reported."]

        for item in items:
            for line in item.split("\n"):
                y = self._ensure_space(y, GRID)
                self.pdf.setFont("Helvetica", 10)
                self.pdf.setFillColor(COLOR_TEXT)
                self.pdf.drawString(x, y - GRID, BULLET_GLYPH)
                y = self._wrap_text(line, x + bullet_indent, y, width - bullet_indent, size=10, line_height=GRID)
            y -= 4

        return y

    def _score_gauge(self, x: float, center_y: float, value: float) -> None:
        self.pdf.setLineWidth(4)
        self.pdf.setStrokeColor(COLOR_BORDER)
        self.pdf.arc(
            x - SCORE_RADIUS,
            center_y - SCORE_RADIUS,
            x + SCORE_RADIUS,
            center_y + SCORE_RADIUS,
            0,
            360,
        )

        if value > 0:
            self.pdf.setStrokeColor(COLOR_ACCENT)
            self.pdf.arc(
                x - SCORE_RADIUS,
                center_y - SCORE_RADIUS,
                x + SCORE_RADIUS,
                center_y + SCORE_RADIUS,
                90,
                -value * 36,
            )

        self.pdf.setFillColor(COLOR_PRIMARY)
        self.pdf.setFont("Helvetica-Bold", 15)
        self.pdf.drawCentredString(x, center_y + 4, f"{value:.1f}/10")

        self.pdf.setFont("Helvetica", 8)
        self.pdf.setFillColor(COLOR_MUTED)
        self.pdf.drawCentredString(x, center_y - 11, "OVERALL")

    def _score_details(self, y: float) -> float:
        scores = self.analysis.scores
        text_x = MARGIN_X + (SCORE_RADIUS * 2) + 40
        lines = [f"{label}: {getattr(scores, key):.1f}/10" for key, label in SCORE_LABELS]
        block_height = max(SCORE_RADIUS * 2, len(lines) * GRID)
        y = self._ensure_space(y, block_height)

        top = y
        center_y = top - SCORE_RADIUS
        self._score_gauge(MARGIN_X + SCORE_RADIUS, center_y, scores.overall)

        self.pdf.setFont("Helvetica", 11)
        self.pdf.setFillColor(COLOR_TEXT)
        text_y = top
        for line in lines:
            text_y -= GRID
            self.pdf.drawString(text_x, text_y, line)

        return min(center_y - SCORE_RADIUS, text_y)

    def _draw_header(self) -> None:
        self.pdf.setFont("Helvetica-Bold", 26)
        self.pdf.setFillColor(COLOR_PRIMARY)
        self.pdf.drawString(MARGIN_X, PAGE_HEIGHT - 48, "Startup Idea Analysis")

        self.pdf.setFont("Helvetica", 11)
        self.pdf.setFillColor(COLOR_MUTED)
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        verdict = "Valid idea" if self.analysis.is_valid else "Not a startup idea"
        self.pdf.drawString(MARGIN_X, PAGE_HEIGHT - 70, f"{verdict} {BULLET_GLYPH} Generated {timestamp}")

    def _draw_footer(self) -> None:
        self.pdf.setStrokeColor(COLOR_BORDER)
        self.pdf.line(MARGIN_X, MARGIN_Y - 6, PAGE_WIDTH - MARGIN_X, MARGIN_Y - 6)

        self.pdf.setFont("Helvetica", 8)
        self.pdf.setFillColor(COLOR_MUTED)
        footer = f"Startup Idea Analyzer {BULLET_GLYPH} Preliminary assessment"
        self.pdf.drawCentredString(PAGE_WIDTH / 2, MARGIN_Y - 18, footer)

    # -- sections --------------------------------------------------------
    def _improvements(self, y: float) -> float:
        improvements = self.analysis.improvements
        for title, items in (
            ("Product-market fit", improvements.product_market_fit),
            ("Branding", improvements.branding),
            ("Pricing", improvements.pricing),
            ("MVP features", improvements.mvp_features),
        ):
            y = self._subtitle(title, y)
            y = self._bullet_list(items, MARGIN_X, y, CONTENT_WIDTH)
        return y

    def _funding(self, y: float) -> float:
        funding = self.analysis.funding_strategy
        for title, items in (
            ("Investor types", funding.investor_types),
            ("Pitch outline", funding.pitch_outline),
            ("Investors to approach", funding.specific_investors),
            ("Networking", funding.networking_tips),
            ("Timeline", funding.timeline.lines()),
        ):
            y = self._subtitle(title, y)
            y = self._bullet_list(items, MARGIN_X, y, CONTENT_WIDTH)
        return y

    def _launch(self, y: float) -> float:
        plan = self.analysis.launch_plan
        for title, items in (
            ("Early adopters", plan.early_adopters),
            ("Launch platforms", plan.launch_platforms),
            ("Community building", plan.community_building),
            ("Key metrics", plan.key_metrics),
            ("90-day plan", [item.display() for item in plan.ninety_day_plan]),
        ):
            y = self._subtitle(title, y)
            y = self._bullet_list(items, MARGIN_X, y, CONTENT_WIDTH)
        return y

    # -- public API ------------------------------------------------------
    def build(self) -> bytes:
        analysis = self.analysis
        y = PAGE_HEIGHT - 100

        self._draw_header()

        y = self._section("Idea", y)
        y = self._wrap_text(analysis.sanitized_input, MARGIN_X, y, CONTENT_WIDTH, size=11)
        y -= GRID

        if not analysis.is_valid:
            y = self._section("Verdict", y)
            self._wrap_text(analysis.satirical_feedback or "", MARGIN_X, y, CONTENT_WIDTH, size=11)
        else:
            y = self._section("Scores", y)
            y = self._score_details(y)
            y -= GRID

            y = self._section("Strengths", y)
            y = self._bullet_list(analysis.pros, MARGIN_X, y, CONTENT_WIDTH)

            y = self._section("Challenges", y)
            y = self._bullet_list(analysis.cons, MARGIN_X, y, CONTENT_WIDTH)

            y = self._section("Benchmark", y)
            y = self._wrap_text(analysis.benchmark_comparison, MARGIN_X, y, CONTENT_WIDTH)
            y -= GRID

            y = self._section("Improvements", y)
            y = self._improvements(y)

            y = self._section("Funding Strategy", y)
            y = self._funding(y)

            y = self._section("Launch Plan", y)
            self._launch(y)

        self._draw_footer()

        self.pdf.save()
        self.buffer.seek(0)
        return self.buffer.getvalue()


def build_pdf_report(analysis: StartupAnalysis) -> bytes:
    return PdfReportBuilder(analysis).build()
