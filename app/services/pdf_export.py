"""PDF rendering for research reports."""
from __future__ import annotations

import re
from datetime import date, datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer
from reportlab.platypus.flowables import HRFlowable

from app.models.research import ResearchReport, SearchResult, SearchSource

SOURCE_GROUP_TITLES = {
    SearchSource.WEB: "Web Sources",
    SearchSource.WIKIPEDIA: "Wikipedia Sources",
    SearchSource.SCHOLAR: "Academic Sources",
    SearchSource.GITHUB: "GitHub Sources",
    SearchSource.NEWS: "News Sources",
}
SNIPPET_PREVIEW_CHARS = 200


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=22, alignment=0),
        "meta": ParagraphStyle("ReportMeta", parent=base["Italic"], fontSize=10),
        "heading": ParagraphStyle("SectionHeading", parent=base["Heading1"], fontSize=16),
        "subheading": ParagraphStyle("GroupHeading", parent=base["Heading2"], fontSize=14),
        "body": ParagraphStyle("Body", parent=base["BodyText"], fontSize=11, leading=15),
        "citation": ParagraphStyle("Citation", parent=base["BodyText"], fontName="Helvetica-Bold", fontSize=10),
        "url": ParagraphStyle("Url", parent=base["BodyText"], fontSize=10, textColor=colors.blue),
        "snippet": ParagraphStyle(
            "Snippet",
            parent=base["Italic"],
            fontSize=10,
            textColor=colors.Color(80 / 255, 80 / 255, 80 / 255),
            spaceAfter=8,
        ),
    }


def _paragraphs(text: str, style: ParagraphStyle) -> list[Paragraph]:
    return [Paragraph(escape(line.strip()), style) for line in text.split("\n") if line.strip()]


def _group_sources(sources: tuple[SearchResult, ...]) -> dict[SearchSource, list[SearchResult]]:
    grouped: dict[SearchSource, list[SearchResult]] = {}
    for source in sources:
        grouped.setdefault(source.source, []).append(source)
    return grouped


def _snippet_preview(snippet: str) -> str:
    if len(snippet) > SNIPPET_PREVIEW_CHARS:
        return snippet[:SNIPPET_PREVIEW_CHARS] + "..."
    return snippet


def render_report_pdf(
    report: ResearchReport,
    topic: str,
    *,
    generated_on: date | None = None,
) -> bytes:
    """Render the report sections into an A4 PDF and return its bytes."""
    styles = _styles()
    generated_on = generated_on or date.today()
    story: list = [
        Paragraph(escape(f"Research: {topic}"), styles["title"]),
        Paragraph(f"Generated on {generated_on.isoformat()}", styles["meta"]),
        HRFlowable(width="100%", thickness=0.5, color=colors.black, spaceAfter=6),
    ]

    if report.summary:
        story.append(Paragraph("Summary", styles["heading"]))
        story.extend(_paragraphs(report.summary, styles["body"]))

    if report.detailed_analysis:
        story.append(PageBreak())
        story.append(Paragraph("Detailed Analysis", styles["heading"]))
        story.extend(_paragraphs(report.detailed_analysis, styles["body"]))

    if report.sources:
        story.append(PageBreak())
        story.append(Paragraph("Sources &amp; Citations", styles["heading"]))
        for source_type, items in _group_sources(report.sources).items():
            story.append(Paragraph(SOURCE_GROUP_TITLES[source_type], styles["subheading"]))
            for idx, item in enumerate(items, 1):
                story.append(Paragraph(escape(f"[{idx}] {item.title}"), styles["citation"]))
                story.append(Paragraph(escape(f"URL: {item.link}"), styles["url"]))
                if item.snippet:
                    story.append(
                        Paragraph(escape(f"Description: {_snippet_preview(item.snippet)}"), styles["snippet"])
                    )
                else:
                    story.append(Spacer(1, 8))

    if report.related_topics:
        story.append(Spacer(1, 10))
        story.append(Paragraph("Related Research Topics", styles["heading"]))
        for related in report.related_topics:
            story.append(Paragraph(escape(related), styles["body"], bulletText="•"))

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=20 * mm,
        bottomMargin=17 * mm,
        title=f"Research: {topic}",
    )
    doc.build(story)
    return buffer.getvalue()


def report_filename(topic: str, timestamp: datetime | None = None) -> str:
    ts = timestamp or datetime.now()
    slug = re.sub(r"[^a-z0-9]", "_", topic, flags=re.IGNORECASE).lower()
    return f"Research_{slug}_{int(ts.timestamp() * 1000)}.pdf"
