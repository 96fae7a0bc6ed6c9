"""Run pipeline command."""

import asyncio
from typing import Optional

import click
from pydantic import ValidationError

from newsdigest.core.config import Config, PipelineConfig
from newsdigest.pipeline.orchestrator import PipelineOrchestrator
from newsdigest.utils.exceptions import NewsDigestError
from newsdigest.utils.logging import setup_logging


@click.command()
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum items per source (overrides MAX_ITEMS_PER_SOURCE)",
)
@click.option(
    "--skip-notify",
    is_flag=True,
    help="Do not send Telegram or email notifications",
)
@click.option(
    "--skip-readme",
    is_flag=True,
    help="Do not update the README summary blocks",
)
def run(limit: Optional[int], skip_notify: bool, skip_readme: bool) -> None:
    """Run the news digest pipeline.

    Examples:
        newsdigest run                  # Full run with notifications
        newsdigest run --skip-notify    # Write artifacts only
        newsdigest run --limit 5        # At most 5 items per source
    """
    # Load configuration
    try:
        config = Config()  # type: ignore
        config.validate_paths()
    except (ValidationError, OSError) as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        click.echo("Please check the .env file and environment variables.", err=True)
        raise click.Abort()

    # Setup logging
    setup_logging(log_level=config.log_level, log_format=config.log_format, log_dir=config.log_dir)

    # Display configuration
    click.echo("NewsDigest Pipeline")
    click.echo("=" * 50)
    click.echo(f"Keywords: {', '.join(config.keywords) or 'No filter'}")
    click.echo(f"Time range: {config.news_time_range.value}")
    click.echo(f"Items per source: {limit or config.max_items_per_source}")
    click.echo(f"Model: {config.llm_provider}/{config.llm_model}")
    click.echo("=" * 50)

    pipeline_config = PipelineConfig(
        skip_notifications=skip_notify,
        skip_readme=skip_readme,
        limit=limit,
    )

    try:
        orchestrator = PipelineOrchestrator(config=config, pipeline_config=pipeline_config)
        stats = asyncio.run(orchestrator.run())

    except KeyboardInterrupt:
        click.echo("\nPipeline interrupted by user.", err=True)
        raise click.Abort()

    except NewsDigestError as e:
        click.echo(f"\nPipeline failed: {e}", err=True)
        raise click.Abort()

    _display_pipeline_results(stats)


def _display_pipeline_results(stats: dict) -> None:
    """Display pipeline results.

    Args:
        stats: Statistics returned by the orchestrator.
    """
    click.echo("\nPipeline Results:")
    click.echo("=" * 50)

    click.echo("\nSources:")
    for source, count in stats.get("sources", {}).items():
        click.echo(f"  {source:<24} {count:>6} articles")

    click.echo(f"\n  Collected:     {stats.get('collected', 0):>6} articles")
    click.echo(f"  After merge:   {stats.get('merged', 0):>6} articles")

    if not stats.get("merged"):
        click.echo("\nNo matching articles, nothing was published.")
        return

    click.echo(f"  Classified:    {stats.get('classified', 0):>6} articles")

    click.echo("\nOutputs:")
    for key, label in (
        ("rss_written", "RSS feed"),
        ("markdown_written", "Daily document"),
        ("readme_updated", "README"),
        ("telegram_sent", "Telegram"),
        ("email_sent", "Email"),
    ):
        click.echo(f"  {label:<16} {'yes' if stats.get(key) else 'no'}")

    click.echo("\nPipeline completed successfully!")
