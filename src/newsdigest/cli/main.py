"""Command-line interface for NewsDigest."""

import click

from newsdigest.__version__ import __version__
from newsdigest.cli.commands import run, trends


@click.group()
@click.version_option(version=__version__, prog_name="newsdigest")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """NewsDigest - multi-source tech news digest.

    Collects stories from HackerNews, RSS feeds, Reddit, Product Hunt, X and
    GitHub, merges them, asks an LLM for a briefing and publishes the result
    as an RSS feed, a daily Markdown document, a README summary and push
    notifications.
    """
    ctx.ensure_object(dict)


# Register commands
cli.add_command(run)
cli.add_command(trends)


def main() -> None:
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
