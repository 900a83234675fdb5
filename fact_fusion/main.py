"""Main script for running the fact checker interactively."""

import argparse
import asyncio
from typing import List, Optional

from rich import print
from rich.markup import escape

from .domain.exceptions import FactCheckError
from .domain.models.claim import Domain
from .domain.models.fact_check_result import FactCheckRequest, FactCheckResult
from .infrastructure.config import FactFusionConfig, configure_logging
from .infrastructure.dependencies import ServiceContainer


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fact-fusion",
        description="Check the factual claims in a piece of text",
    )
    parser.add_argument(
        "--domain",
        choices=[domain.value for domain in Domain],
        help="Vertical the text belongs to",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Require 80%% confidence instead of 60%% to accept a claim",
    )
    return parser.parse_args(argv)


def print_result(result: FactCheckResult) -> None:
    """Print a fact check result to the console."""
    print(f"\n[bold]Overall confidence:[/bold] {result.overall_confidence:.0f}%")
    print(f"[dim]{result.processing_time_ms} ms, {len(result.sources_used)} sources[/dim]")

    if result.verified_claims:
        print("\n[green]Verified claims:[/green]")
        for i, claim in enumerate(result.verified_claims, 1):
            print(f"{i}. {escape(claim.statement)} ({claim.confidence:.0f}%, {claim.verification_method.value})")

    if result.issues:
        print("\n[red]Issues:[/red]")
        for i, issue in enumerate(result.issues, 1):
            print(f"{i}. {escape(issue.statement)} ({issue.kind.value}, {issue.confidence:.0f}%)")
            for evidence in issue.evidence:
                print(f"   - {escape(evidence)}")
            if issue.suggested_correction:
                print(f"   [yellow]{escape(issue.suggested_correction)}[/yellow]")

    if not result.verified_claims and not result.issues:
        print("\nNo checkable claims found.")


async def main(argv: Optional[List[str]] = None) -> None:
    """Run the fact checker."""
    args = parse_args(argv)
    config = FactFusionConfig.from_env()
    configure_logging(config.log_level)

    print("[bold]Fact Fusion[/bold] - fact checking against a knowledge store and external sources")
    print("-------------------------------------------------------------------------------")

    container = ServiceContainer(config)
    verifier = await container.get_fact_verifier()
    domain = Domain(args.domain) if args.domain else None

    try:
        while True:
            content = input("\nEnter text to fact-check (or 'quit' to exit): ")
            if content.lower() in ('quit', 'exit', 'q'):
                break

            print("\nChecking facts...")
            try:
                result = await verifier.check(
                    FactCheckRequest(content=content, domain=domain, strict_mode=args.strict)
                )
                print_result(result)
            except FactCheckError as e:
                print(f"\n[red]Error checking facts: {e}[/red]")

    finally:
        await container.shutdown()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    run()
