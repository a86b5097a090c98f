"""Render progress report snapshots into exportable artifacts.

Two artifacts are produced:
- A self-contained XHTML report document, handed to a "convert to file"
  collaborator (e.g. print-to-PDF).
- A fixed 1080x1920 visual card, serialized as SVG, handed to a share
  collaborator as an image.

Both renderings are deterministic: the same snapshot always produces
byte-identical output.
"""

import re
import xml.etree.ElementTree as ET
from typing import Optional
from xml.dom import minidom

from trainlog.config import get_settings
from trainlog.schemas.report import (
    CardPR,
    ExportArtifact,
    ReportSnapshot,
    StatTile,
    TrendClass,
    TrendSummary,
    VisualCard,
)

settings = get_settings()

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"

DOCUMENT_MIME_TYPE = "text/html"
CARD_MIME_TYPE = "image/svg+xml"

RATING_COLORS = {
    "Excellent": "#10B981",
    "Good": "#FFD700",
    "Fair": "#F59E0B",
    "Needs Improvement": "#E63946",
}

DOCUMENT_STYLE = (
    "body { font-family: Helvetica, Arial, sans-serif; color: #1a1a1a; margin: 32px; } "
    "h1 { color: #E63946; margin-bottom: 4px; } "
    "h2 { border-bottom: 2px solid #E63946; padding-bottom: 4px; margin-top: 28px; } "
    "table { border-collapse: collapse; width: 100%; } "
    "th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #ddd; } "
    ".muted { color: #777; } "
    ".rating { font-size: 28px; font-weight: bold; } "
    ".empty { color: #777; font-style: italic; } "
    ".footer { margin-top: 40px; color: #777; font-size: 12px; text-align: center; }"
)


def format_trend(trend: TrendSummary) -> str:
    """Trend text as shown on the report, e.g. "+4.2%" or "Need more data"."""
    if trend.trend == TrendClass.INSUFFICIENT or trend.percent_change is None:
        return "Need more data"
    if trend.trend == TrendClass.STABLE:
        return "Stable"
    sign = "+" if trend.percent_change >= 0 else ""
    return f"{sign}{trend.percent_change:.1f}%"


def format_number(value: float) -> str:
    """Whole numbers without decimals, everything else with one decimal."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


class ReportRenderer:
    """Render snapshots into the report document and the visual card."""

    CARD_WIDTH = 1080
    CARD_HEIGHT = 1920
    CARD_PR_LIMIT = 3

    def __init__(
        self,
        app_name: Optional[str] = None,
        report_title: Optional[str] = None,
    ) -> None:
        self.app_name = app_name or settings.APP_NAME
        self.report_title = report_title or settings.REPORT_TITLE

    # ============== Report document ==============

    def render_document(self, snapshot: ReportSnapshot) -> str:
        """
        Render a snapshot as a self-contained XHTML document.

        All aggregate fields are embedded along with static branding. Sections
        without data render an explicit empty-state line.

        Args:
            snapshot: Aggregated report snapshot

        Returns:
            XHTML string, byte-stable for a given snapshot
        """
        html = ET.Element("html", {"xmlns": XHTML_NAMESPACE, "lang": "en"})

        head = ET.SubElement(html, "head")
        ET.SubElement(head, "meta", {"charset": "utf-8"})
        ET.SubElement(head, "title").text = f"{self.app_name} - {self.report_title}"
        ET.SubElement(head, "style").text = DOCUMENT_STYLE

        body = ET.SubElement(html, "body")
        self._add_header(body, snapshot)
        self._add_overall(body, snapshot)
        self._add_workouts(body, snapshot)
        self._add_strength(body, snapshot)
        self._add_measurements(body, snapshot)
        self._add_goals(body, snapshot)
        self._add_cycles(body, snapshot)
        self._add_recommendations(body, snapshot)

        footer = ET.SubElement(body, "p", {"class": "footer"})
        footer.text = (
            f"Generated by {self.app_name} on {snapshot.generated_at:%B %d, %Y}"
        )

        return self._serialize(html)

    def _add_header(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        ET.SubElement(body, "h1").text = self.report_title
        if snapshot.user_name:
            ET.SubElement(body, "p").text = snapshot.user_name
        ET.SubElement(body, "p", {"class": "muted"}).text = (
            f"{snapshot.window_start:%b %d, %Y} - {snapshot.generated_at:%b %d, %Y}"
        )

    def _add_overall(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        performance = snapshot.performance
        ET.SubElement(body, "h2").text = "Overall Performance"
        rating = ET.SubElement(
            body,
            "p",
            {
                "class": "rating",
                "style": f"color: {RATING_COLORS[performance.rating.value]}",
            },
        )
        rating.text = performance.rating.value
        ET.SubElement(body, "p", {"class": "muted"}).text = f"Score {performance.total}/100"

    def _add_table(
        self, parent: ET.Element, headers: list[str], rows: list[list[str]]
    ) -> None:
        table = ET.SubElement(parent, "table")
        header_row = ET.SubElement(table, "tr")
        for header in headers:
            ET.SubElement(header_row, "th").text = header
        for row in rows:
            tr = ET.SubElement(table, "tr")
            for cell in row:
                ET.SubElement(tr, "td").text = cell

    def _add_empty(self, parent: ET.Element, message: str) -> None:
        ET.SubElement(parent, "p", {"class": "empty"}).text = message

    def _add_workouts(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        workouts = snapshot.workouts
        ET.SubElement(body, "h2").text = "Workouts"
        if workouts.total_workouts == 0:
            self._add_empty(body, "No workouts logged in this period")
        self._add_table(
            body,
            ["Metric", "Value"],
            [
                ["Total workouts", str(workouts.total_workouts)],
                ["Training time", f"{format_number(workouts.total_hours)} h"],
                ["Avg duration", f"{format_number(workouts.average_duration)} min"],
                ["Avg intensity", f"{workouts.average_intensity:.1f}/10"],
                [f"Last {settings.CONSISTENCY_WINDOW_DAYS} days", str(workouts.recent_workouts)],
                ["Consistency", f"{format_number(workouts.consistency)}%"],
            ],
        )

    def _add_strength(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        ET.SubElement(body, "h2").text = "Strength Progress"
        ET.SubElement(body, "p").text = f"Trend: {format_trend(snapshot.strength_trend)}"
        if not snapshot.latest_prs:
            self._add_empty(body, "No personal records in this period")
            return
        self._add_table(
            body,
            ["Test", "Latest", "Change", "History"],
            [
                [
                    pr.label,
                    pr.display_value,
                    format_trend(pr.trend),
                    f"{pr.history_count} {'entry' if pr.history_count == 1 else 'entries'}",
                ]
                for pr in snapshot.latest_prs
            ],
        )

    def _add_measurements(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        ET.SubElement(body, "h2").text = "Body Measurements"
        if not snapshot.measurement_trends:
            self._add_empty(body, "No measurements in this period")
            return
        self._add_table(
            body,
            ["Measurement", "First", "Latest", "Change"],
            [
                [
                    trend.measurement.value.capitalize(),
                    trend.oldest_display,
                    trend.latest_display,
                    format_trend(trend.trend),
                ]
                for trend in snapshot.measurement_trends
            ],
        )

    def _add_goals(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        goals = snapshot.goals
        ET.SubElement(body, "h2").text = "Goal Achievement"
        if goals.total == 0:
            self._add_empty(body, "No goals set")
            return
        ET.SubElement(body, "p").text = (
            f"{goals.completed} of {goals.total} goals completed "
            f"({format_number(goals.success_rate)}%)"
        )

    def _add_cycles(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        ET.SubElement(body, "h2").text = "Active Training Cycles"
        if not snapshot.active_cycles:
            self._add_empty(body, "No active training cycles")
            return
        self._add_table(
            body,
            ["Cycle", "Type", "Dates"],
            [
                [
                    cycle.name,
                    cycle.cycle_type,
                    f"{cycle.start_date:%b %d, %Y} - {cycle.end_date:%b %d, %Y}",
                ]
                for cycle in snapshot.active_cycles
            ],
        )

    def _add_recommendations(self, body: ET.Element, snapshot: ReportSnapshot) -> None:
        if not snapshot.recommendations:
            return
        ET.SubElement(body, "h2").text = "Recommendations"
        items = ET.SubElement(body, "ul")
        for advice in snapshot.recommendations:
            ET.SubElement(items, "li").text = advice

    def _serialize(self, root: ET.Element) -> str:
        xml_str = ET.tostring(root, encoding="unicode")
        dom = minidom.parseString(xml_str)
        return dom.toprettyxml(indent="    ", encoding="UTF-8").decode("utf-8")

    # ============== Visual card ==============

    def render_visual_card(self, snapshot: ReportSnapshot) -> VisualCard:
        """
        Lay out the shareable progress card.

        The card has a fixed 1080x1920 size regardless of the display it
        is rendered on: a 2x2 stats grid, up to three PR highlights and the
        app branding.
        """
        workouts = snapshot.workouts
        tiles = (
            StatTile(value=str(workouts.total_workouts), label="Total Workouts"),
            StatTile(value=f"{format_number(workouts.total_hours)}h", label="Training Time"),
            StatTile(
                value=str(workouts.recent_workouts),
                label=f"Last {settings.CONSISTENCY_WINDOW_DAYS} Days",
            ),
            StatTile(value=f"{workouts.average_intensity:.1f}/10", label="Avg Intensity"),
        )
        prs = tuple(
            CardPR(label=pr.label, value=pr.display_value)
            for pr in snapshot.latest_prs[: self.CARD_PR_LIMIT]
        )
        return VisualCard(
            width=self.CARD_WIDTH,
            height=self.CARD_HEIGHT,
            title=settings.CARD_TITLE,
            user_name=snapshot.user_name,
            tiles=tiles,
            prs=prs,
            tagline=settings.CARD_TAGLINE,
            app_name=self.app_name,
        )

    def render_card_svg(self, card: VisualCard) -> str:
        """Serialize a visual card to a fixed-size SVG document."""
        svg = ET.Element(
            "svg",
            {
                "xmlns": SVG_NAMESPACE,
                "width": str(card.width),
                "height": str(card.height),
                "viewBox": f"0 0 {card.width} {card.height}",
            },
        )

        defs = ET.SubElement(svg, "defs")
        gradient = ET.SubElement(
            defs, "linearGradient", {"id": "bg", "x1": "0", "y1": "0", "x2": "0", "y2": "1"}
        )
        for offset, color in (("0", "#1a1a1a"), ("0.5", "#2d1b1b"), ("1", "#1a1a1a")):
            ET.SubElement(gradient, "stop", {"offset": offset, "stop-color": color})
        ET.SubElement(
            svg, "rect", {"width": str(card.width), "height": str(card.height), "fill": "url(#bg)"}
        )

        center = str(card.width // 2)
        self._svg_text(svg, center, 260, "\U0001F4AA", 120)
        self._svg_text(svg, center, 420, card.title, 72, fill="#E63946", bold=True)
        if card.user_name:
            self._svg_text(svg, center, 500, card.user_name, 48, bold=True)

        # 2x2 stats grid, each tile 45% of the card width
        padding = 60
        gap = 30
        tile_width = int(card.width * 0.45)
        tile_height = 260
        grid_left = (card.width - 2 * tile_width - gap) // 2
        grid_top = 600
        for index, tile in enumerate(card.tiles):
            row, column = divmod(index, 2)
            x = grid_left + column * (tile_width + gap)
            y = grid_top + row * (tile_height + gap)
            ET.SubElement(
                svg,
                "rect",
                {
                    "x": str(x),
                    "y": str(y),
                    "width": str(tile_width),
                    "height": str(tile_height),
                    "rx": "20",
                    "fill": "#E63946",
                    "fill-opacity": "0.1",
                    "stroke": "#E63946",
                    "stroke-width": "2",
                },
            )
            tile_center = str(x + tile_width // 2)
            self._svg_text(svg, tile_center, y + 140, tile.value, 80, fill="#E63946", bold=True)
            self._svg_text(svg, tile_center, y + 210, tile.label, 36, fill="#999999")

        if card.prs:
            prs_top = grid_top + 2 * tile_height + gap + 140
            self._svg_text(svg, center, prs_top, f"\U0001F3C6 {card.pr_title}", 56, fill="#FFD700", bold=True)
            for index, pr in enumerate(card.prs):
                y = prs_top + 100 + index * 110
                self._svg_text(svg, str(padding + 40), y, pr.label, 40, anchor="start")
                self._svg_text(
                    svg,
                    str(card.width - padding - 40),
                    y,
                    pr.value,
                    44,
                    fill="#E63946",
                    bold=True,
                    anchor="end",
                )

        self._svg_text(svg, center, card.height - 180, card.tagline, 36, fill="#999999")
        self._svg_text(svg, center, card.height - 110, card.app_name, 56, fill="#E63946", bold=True)

        return self._serialize(svg)

    def _svg_text(
        self,
        parent: ET.Element,
        x: str,
        y: int,
        text: str,
        size: int,
        fill: str = "#FFFFFF",
        bold: bool = False,
        anchor: str = "middle",
    ) -> None:
        attributes = {
            "x": x,
            "y": str(y),
            "font-family": "Helvetica, Arial, sans-serif",
            "font-size": str(size),
            "fill": fill,
            "text-anchor": anchor,
        }
        if bold:
            attributes["font-weight"] = "bold"
        ET.SubElement(parent, "text", attributes).text = text

    # ============== Export artifacts ==============

    def export_document(self, snapshot: ReportSnapshot) -> ExportArtifact:
        """Report document wrapped for the convert-to-file collaborator."""
        return ExportArtifact(
            filename=self.generate_filename(snapshot, "html"),
            mime_type=DOCUMENT_MIME_TYPE,
            content=self.render_document(snapshot),
        )

    def export_card(self, snapshot: ReportSnapshot) -> ExportArtifact:
        """Visual card wrapped for the share collaborator."""
        return ExportArtifact(
            filename=self.generate_filename(snapshot, "svg"),
            mime_type=CARD_MIME_TYPE,
            content=self.render_card_svg(self.render_visual_card(snapshot)),
        )

    def generate_filename(self, snapshot: ReportSnapshot, extension: str) -> str:
        """
        Generate a safe filename for an exported artifact.

        Returns:
            Filename such as "jane_doe_progress_20240315.html"
        """
        base = "progress"
        if snapshot.user_name:
            safe_name = re.sub(r"[^\w\s-]", "", snapshot.user_name)
            safe_name = re.sub(r"[-\s]+", "_", safe_name).strip("_").lower()[:50]
            if safe_name:
                base = f"{safe_name}_progress"
        return f"{base}_{snapshot.generated_at:%Y%m%d}.{extension}"


# Singleton instance
report_renderer = ReportRenderer()
