#!/usr/bin/env python3
"""
CLI for the chronicle ingestion pipeline

Commands:
    init-db         - Create the database tables
    ingest-review   - Fetch one chronicle and upsert it
    ingest-reviews  - Fetch every new chronicle (or all with --update)
    list-links      - Print the links already stored
    delete-review   - Delete a stored chronicle (and its orphan poster)
    runs            - Show the latest batch runs
    tmdb-search     - Resolve a TMDB id by title/year
    tmdb-details    - Show TMDB details for an id

Usage:
    python cli.py ingest-review https://www.nanarland.com/chroniques/main/samurai-cop.html
    python cli.py ingest-reviews --delay 2 --max-count 10
    python cli.py ingest-reviews --update --ignore-cache
    python cli.py tmdb-search "Samurai Cop" --year 1991
"""

import click
import sys
import json


def get_app():
    from app import create_app
    return create_app()


def _echo_outcome(outcome):
    color = "green" if outcome.outcome.name == "INSERTED" else "yellow"
    year = f" ({outcome.release_year})" if outcome.release_year else ""
    click.echo(
        click.style(f"  {outcome.outcome.name:<9}", fg=color)
        + f"#{outcome.id} {outcome.title}{year} - {outcome.link}"
    )


@click.group()
@click.version_option(version="1.0.0", prog_name="nanar-ingest")
def cli():
    """Nanarland ingestion CLI - scrape chronicles into the database."""
    pass


@cli.command("init-db")
def init_db():
    """Create every table (use flask db upgrade for migrations)."""
    app = get_app()
    with app.app_context():
        from models.database import db
        db.create_all()
    click.secho("Tables created", fg="green")


@cli.command("ingest-review")
@click.argument("link")
@click.option("--ignore-cache", is_flag=True, help="Render the page live")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def ingest_review(link, ignore_cache, output_json):
    """
    Fetch one chronicle and upsert it.

    LINK: Absolute chronicle URL
    """
    app = get_app()
    with app.app_context():
        from services.ingestion import get_ingestion

        outcome = get_ingestion().orchestrator.fetch_and_upsert_review(
            link, ignore_cache=ignore_cache
        )

    if output_json:
        click.echo(json.dumps([outcome.to_dict()], indent=2))
        return
    _echo_outcome(outcome)


@cli.command("ingest-reviews")
@click.option("--delay", type=click.FloatRange(min=0), default=1.0, show_default=True,
              help="Seconds between two chronicles")
@click.option("--max-count", type=click.IntRange(min=0), default=None,
              help="Stop after this many chronicles")
@click.option("--update", is_flag=True, help="Reprocess chronicles already stored")
@click.option("--ignore-cache", is_flag=True, help="Render every page live")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def ingest_reviews(delay, max_count, update, ignore_cache, output_json):
    """Fetch every chronicle listed on the site."""
    app = get_app()
    with app.app_context():
        from services.ingestion import get_ingestion

        try:
            outcomes = get_ingestion().orchestrator.fetch_and_upsert_reviews(
                delay=delay,
                max_count=max_count,
                update=update,
                ignore_cache=ignore_cache,
                triggered_by="cli",
            )
        except Exception as e:
            click.secho(f"Batch aborted: {e}", fg="red", err=True)
            sys.exit(1)

    if output_json:
        click.echo(json.dumps([o.to_dict() for o in outcomes], indent=2))
        return

    click.echo("=" * 60)
    click.secho("INGESTION SUMMARY", fg="cyan", bold=True)
    click.echo("=" * 60)
    for outcome in outcomes:
        _echo_outcome(outcome)
    inserted = sum(1 for o in outcomes if o.outcome.name == "INSERTED")
    click.echo()
    click.echo(f"  Inserted: {inserted}")
    click.echo(f"  Updated:  {len(outcomes) - inserted}")


@cli.command("list-links")
def list_links():
    """Print every stored chronicle link."""
    app = get_app()
    with app.app_context():
        from services.ingestion import get_ingestion
        for link in get_ingestion().store.list_links():
            click.echo(link)


@cli.command("delete-review")
@click.argument("link")
@click.confirmation_option(prompt="Delete this review?")
def delete_review(link):
    """Delete a stored chronicle."""
    app = get_app()
    with app.app_context():
        from services.ingestion import get_ingestion
        review = get_ingestion().orchestrator.delete_review(link)
        click.secho(f"Deleted #{review.id} {review.title}", fg="green")


@cli.command("runs")
@click.option("--limit", default=10, show_default=True)
def runs(limit):
    """Show the latest batch runs."""
    app = get_app()
    with app.app_context():
        from services.ingestion import get_ingestion

        for run in get_ingestion().orchestrator.get_recent_runs(limit=limit):
            color = {"completed": "green", "failed": "red"}.get(run.status, "white")
            click.echo(
                f"{run.run_id[:8]}  "
                + click.style(f"{run.status:<9}", fg=color)
                + f"  {run.started_at}  +{run.items_inserted} ~{run.items_updated}"
                + (f"  failed on {run.failed_link}" if run.failed_link else "")
            )


def _tmdb_client(app):
    from services.ingestion import get_ingestion

    client = get_ingestion().tmdb_client
    if client is None:
        click.secho("TMDB_TOKEN is not set", fg="red", err=True)
        sys.exit(1)
    return client


@cli.command("tmdb-search")
@click.argument("title")
@click.option("--year", type=int, default=None, help="Release year")
def tmdb_search(title, year):
    """Resolve the TMDB id of a movie (first search result)."""
    from scrapers.errors import NotFoundError

    app = get_app()
    with app.app_context():
        client = _tmdb_client(app)
        try:
            movie_id = client.resolve_id(title, year)
        except NotFoundError as e:
            click.secho(str(e), fg="yellow")
            sys.exit(1)
    click.echo(movie_id)


@cli.command("tmdb-details")
@click.argument("movie_id", type=int)
@click.option("--language", default=None, help="Response language (default TMDB_LANGUAGE)")
@click.option("--ignore-cache", is_flag=True, help="Skip the cached answer")
def tmdb_details(movie_id, language, ignore_cache):
    """Show TMDB details of a movie."""
    app = get_app()
    with app.app_context():
        client = _tmdb_client(app)
        details = client.fetch_details(movie_id, ignore_cache=ignore_cache, language=language)
    click.echo(json.dumps(details.to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
