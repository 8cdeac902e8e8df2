from __future__ import annotations

from datetime import date, datetime

from app.models.research import ResearchReport, SearchResult, SearchSource
from app.services.pdf_export import _snippet_preview, render_report_pdf, report_filename


def _source(source: SearchSource, idx: int, snippet: str = "A snippet") -> SearchResult:
    return SearchResult(
        title=f"{source.value} <title> {idx}",
        link=f"https://{source.value}.example/{idx}?a=1&b=2",
        snippet=snippet,
        source=source,
        position=idx,
    )


def test_render_full_report_produces_pdf_bytes():
    report = ResearchReport(
        summary="# Overview\nFusion & fission differ.\n\nSecond paragraph.",
        sources=(
            _source(SearchSource.WEB, 1),
            _source(SearchSource.SCHOLAR, 1, snippet=""),
            _source(SearchSource.WEB, 2, snippet="x" * 500),
        ),
        detailed_analysis="History <1950>\nToday",
        related_topics=("Tokamaks", "Inertial confinement"),
    )

    pdf = render_report_pdf(report, "Fusion & <energy>", generated_on=date(2024, 5, 1))

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_render_summary_only_report():
    pdf = render_report_pdf(ResearchReport(summary="Just a summary."), "topic")
    assert pdf.startswith(b"%PDF")


def test_snippet_preview_truncates_long_descriptions():
    assert _snippet_preview("short") == "short"
    preview = _snippet_preview("y" * 201)
    assert preview == "y" * 200 + "..."


def test_report_filename_slugifies_topic():
    ts = datetime(2024, 5, 1, 12, 0, 0)
    name = report_filename("Quantum Computing: 2024?", timestamp=ts)

    assert name == f"Research_quantum_computing__2024__{int(ts.timestamp() * 1000)}.pdf"
