import json

import pytest
from click.testing import CliRunner

import cli as cli_module
from scrapers.errors import NotFoundError

from nanarland_pages import INDEX_URL, chronicle_html, chronicle_link, index_html

LINK = chronicle_link("samurai-cop")


@pytest.fixture
def runner(app, renderer, monkeypatch):
    renderer.pages[INDEX_URL] = index_html([LINK])
    renderer.pages[LINK] = chronicle_html()
    monkeypatch.setattr(cli_module, "get_app", lambda: app)
    return CliRunner()


def test_ingest_review(runner):
    result = runner.invoke(cli_module.cli, ["ingest-review", LINK, "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)[0]["outcome"] == "INSERTED"


def test_ingest_reviews_then_list_links(runner, ingestion):
    ingestion.orchestrator.sleep = lambda seconds: None

    result = runner.invoke(cli_module.cli, ["ingest-reviews", "--delay", "0"])
    assert result.exit_code == 0, result.output
    assert "Inserted: 1" in result.output

    result = runner.invoke(cli_module.cli, ["list-links"])
    assert result.output.split() == [LINK]

    result = runner.invoke(cli_module.cli, ["runs"])
    assert "completed" in result.output


def test_ingest_reviews_abort_exit_code(runner, renderer):
    renderer.pages[LINK] = chronicle_html(title="")

    result = runner.invoke(cli_module.cli, ["ingest-reviews", "--delay", "0"])

    assert result.exit_code == 1
    assert "Batch aborted" in result.output


def test_tmdb_search(runner, tmdb_client):
    result = runner.invoke(cli_module.cli, ["tmdb-search", "Samurai Cop", "--year", "1991"])

    assert result.exit_code == 0
    assert result.output.strip() == "9999"
    tmdb_client.resolve_id.assert_called_once_with("Samurai Cop", 1991)


def test_tmdb_search_not_found(runner, tmdb_client):
    tmdb_client.resolve_id.side_effect = NotFoundError('Movie with query "Nope" not found.')

    result = runner.invoke(cli_module.cli, ["tmdb-search", "Nope"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_delete_review(runner):
    runner.invoke(cli_module.cli, ["ingest-review", LINK])

    result = runner.invoke(cli_module.cli, ["delete-review", LINK, "--yes"])

    assert result.exit_code == 0, result.output
    assert "Deleted" in result.output
