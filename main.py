"""Research Assistant

Simple CLI for running one research pass.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from app.agents.orchestrator import ResearchOrchestrator
from app.config import settings
from app.models.errors import ResearchError
from app.models.research import Depth, SearchSource
from app.services.pdf_export import render_report_pdf


async def run_research(args: argparse.Namespace) -> int:
    """Run research on the given topic and print the report."""
    print(f"Research topic: {args.topic}")
    print("-" * 50)

    async with httpx.AsyncClient(timeout=settings.search_timeout_seconds) as http_client:
        orchestrator = ResearchOrchestrator.from_settings(settings, http_client=http_client)
        try:
            params = orchestrator.validate(
                topic=args.topic,
                provider=args.provider or settings.default_provider,
                model=args.model or settings.default_model,
                depth=args.depth,
                sources=args.source,
                include_sources=not args.no_sources,
                max_results=args.max_results,
            )
            report = await orchestrator.conduct_research(params)
        except ResearchError as e:
            print(f"\n[!] Error: {e}", file=sys.stderr)
            return 1

    print(f"\n{'='*50}")
    print("SUMMARY:")
    print(f"{'='*50}")
    print(report.summary)

    if report.detailed_analysis:
        print(f"\n{'='*50}")
        print("DETAILED ANALYSIS:")
        print(f"{'='*50}")
        print(report.detailed_analysis)

    if report.sources:
        print(f"\n[*] Sources ({len(report.sources)}):")
        for i, source in enumerate(report.sources, 1):
            print(f"  {i}. [{source.source.value}] {source.title}")
            print(f"     {source.link}")

    if report.related_topics:
        print("\n[*] Related topics:")
        for topic in report.related_topics:
            print(f"  - {topic}")

    if args.pdf:
        path = Path(args.pdf)
        path.write_bytes(render_report_pdf(report, params.topic))
        print(f"\n[+] PDF written to {path}")

    return 0


def main():
    parser = argparse.ArgumentParser(description="Multi-source research assistant")
    parser.add_argument("--topic", "-t", required=True, help="Research topic")
    parser.add_argument("--provider", "-p", help="LLM provider: openai | anthropic | ollama (default: from config)")
    parser.add_argument("--model", "-m", help="Model to use (default: from config)")
    parser.add_argument(
        "--depth",
        "-d",
        choices=[d.value for d in Depth],
        default=Depth.BASIC.value,
        help="Research depth",
    )
    parser.add_argument(
        "--source",
        "-s",
        action="append",
        choices=[s.value for s in SearchSource],
        help="Search source to use; repeat for several (default: all)",
    )
    parser.add_argument("--no-sources", action="store_true", help="Omit the source list from the report")
    parser.add_argument("--max-results", type=int, help="Override the depth's result budget")
    parser.add_argument("--pdf", help="Also write the report to this PDF path")

    args = parser.parse_args()

    sys.exit(asyncio.run(run_research(args)))


if __name__ == "__main__":
    main()
