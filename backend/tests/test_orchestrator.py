import pytest

from models import Rating, Review, User
from scrapers.errors import ExtractionError, MetadataLookupError, RenderError
from scrapers.models import IngestionRun
from scrapers.orchestrator import BatchState
from scrapers.records import UpsertOutcome

from nanarland_pages import INDEX_URL, chronicle_html, chronicle_link, index_html

SLUGS = ["samurai-cop", "troll-2", "turkish-star-wars"]
LINKS = [chronicle_link(slug) for slug in SLUGS]


@pytest.fixture
def site(renderer):
    """Index listing three chronicles, each with its own page and poster."""
    renderer.pages[INDEX_URL] = index_html(LINKS)
    for slug, link in zip(SLUGS, LINKS):
        renderer.pages[link] = chronicle_html(
            title=slug.replace("-", " ").title(),
            poster=f"/images/posters/{slug}.jpg",
        )
    return renderer


@pytest.fixture
def orchestrator(ingestion):
    sleeps = []
    ingestion.orchestrator.sleep = sleeps.append
    ingestion.orchestrator.sleeps = sleeps
    return ingestion.orchestrator


def test_single_review_inserted_then_updated(orchestrator, site):
    first = orchestrator.fetch_and_upsert_review(LINKS[0])
    assert first.outcome is UpsertOutcome.INSERTED
    assert first.title == "Samurai Cop"
    assert first.release_year == 1991
    assert first.average_rating == 3.5
    assert orchestrator.state is BatchState.DONE

    second = orchestrator.fetch_and_upsert_review(LINKS[0])
    assert second.outcome is UpsertOutcome.UPDATED
    assert second.id == first.id


def test_outcome_wire_format(orchestrator, site):
    outcome = orchestrator.fetch_and_upsert_review(LINKS[0])
    data = outcome.to_dict()
    assert data["outcome"] == "INSERTED"
    assert data["link"] == LINKS[0]
    assert set(data) == {"title", "release_year", "average_rating", "id", "link", "outcome"}


def test_second_fetch_uses_page_cache(orchestrator, site):
    orchestrator.fetch_and_upsert_review(LINKS[0])
    orchestrator.fetch_and_upsert_review(LINKS[0])
    assert site.calls.count(LINKS[0]) == 1

    orchestrator.fetch_and_upsert_review(LINKS[0], ignore_cache=True)
    assert site.calls.count(LINKS[0]) == 2


def test_batch_inserts_all_with_delay_between_items(orchestrator, site, db_session):
    outcomes = orchestrator.fetch_and_upsert_reviews(delay=2)

    assert [o.link for o in outcomes] == LINKS
    assert all(o.outcome is UpsertOutcome.INSERTED for o in outcomes)
    assert orchestrator.sleeps == [2, 2]
    assert db_session.query(Review).count() == 3

    run = db_session.query(IngestionRun).one()
    assert run.status == "completed"
    assert run.links_discovered == 3
    assert run.items_inserted == 3
    assert run.config_snapshot["delay"] == 2


def test_rerun_without_update_processes_nothing(orchestrator, site):
    orchestrator.fetch_and_upsert_reviews(delay=0)
    assert orchestrator.fetch_and_upsert_reviews(delay=0) == []


def test_rerun_picks_up_new_links_only(orchestrator, site):
    orchestrator.fetch_and_upsert_reviews(delay=0, max_count=1)
    outcomes = orchestrator.fetch_and_upsert_reviews(delay=0)
    assert [o.link for o in outcomes] == LINKS[1:]


def test_update_mode_reprocesses_everything_as_updated(orchestrator, site):
    orchestrator.fetch_and_upsert_reviews(delay=0)
    outcomes = orchestrator.fetch_and_upsert_reviews(delay=0, update=True)

    assert [o.link for o in outcomes] == LINKS
    assert all(o.outcome is UpsertOutcome.UPDATED for o in outcomes)


def test_max_count_bounds_batch(orchestrator, site):
    outcomes = orchestrator.fetch_and_upsert_reviews(delay=1, max_count=2)
    assert len(outcomes) == 2
    assert orchestrator.sleeps == [1]


def test_failure_aborts_remaining_batch(orchestrator, site, db_session):
    site.pages[LINKS[1]] = chronicle_html(title="")

    with pytest.raises(ExtractionError) as exc:
        orchestrator.fetch_and_upsert_reviews(delay=0)

    assert exc.value.url == LINKS[1]
    assert orchestrator.state is BatchState.ABORTED
    # First item stays committed, third is never fetched
    assert [r.link for r in db_session.query(Review).all()] == [LINKS[0]]
    assert LINKS[2] not in site.calls

    run = db_session.query(IngestionRun).one()
    assert run.status == "failed"
    assert run.failed_link == LINKS[1]
    assert run.items_inserted == 1
    assert "Main title" in run.error_message


def test_render_failure_propagates(orchestrator, site):
    with pytest.raises(RenderError):
        orchestrator.fetch_and_upsert_review(chronicle_link("unknown"))


def test_ratings_replaced_on_reingest(orchestrator, site, db_session):
    orchestrator.fetch_and_upsert_review(LINKS[0])
    site.pages[LINKS[0]] = chronicle_html(user_ratings=(("Drexl", "1"), ("Nikita", "5")))

    orchestrator.fetch_and_upsert_review(LINKS[0], ignore_cache=True)

    review = db_session.query(Review).filter_by(link=LINKS[0]).one()
    rows = db_session.query(Rating).filter_by(review_id=review.id).all()
    assert sorted((r.user.username, r.value) for r in rows) == [("Drexl", 1.0), ("Nikita", 5.0)]
    assert db_session.query(User).filter_by(username="Jack Tillman").count() == 1


def test_unreferenced_poster_removed_on_change(orchestrator, site, ingestion):
    first = orchestrator.fetch_and_upsert_review(LINKS[0])
    old_poster = ingestion.store.get(first.id).poster_filename
    assert ingestion.poster_store.exists(old_poster)

    site.pages[LINKS[0]] = chronicle_html(poster="/images/posters/new-cover.png")
    orchestrator.fetch_and_upsert_review(LINKS[0], ignore_cache=True)

    new_poster = ingestion.store.get(first.id).poster_filename
    assert new_poster != old_poster
    assert new_poster.endswith(".png")
    assert not ingestion.poster_store.exists(old_poster)


def test_shared_poster_kept(orchestrator, site, ingestion):
    site.pages[LINKS[1]] = chronicle_html(poster="/images/posters/samurai-cop.jpg")
    orchestrator.fetch_and_upsert_review(LINKS[0])
    orchestrator.fetch_and_upsert_review(LINKS[1])
    shared = ingestion.store.find_by_link(LINKS[0]).poster_filename
    assert ingestion.store.find_by_link(LINKS[1]).poster_filename == shared

    site.pages[LINKS[0]] = chronicle_html(poster="/images/posters/other.jpg")
    orchestrator.fetch_and_upsert_review(LINKS[0], ignore_cache=True)

    assert ingestion.poster_store.exists(shared)


def test_delete_review_removes_poster(orchestrator, site, ingestion):
    outcome = orchestrator.fetch_and_upsert_review(LINKS[0])
    poster = ingestion.store.get(outcome.id).poster_filename

    orchestrator.delete_review(LINKS[0])

    assert ingestion.store.find_by_link(LINKS[0]) is None
    assert not ingestion.poster_store.exists(poster)


def test_failed_commit_keeps_previous_poster(orchestrator, site, ingestion, monkeypatch):
    first = orchestrator.fetch_and_upsert_review(LINKS[0])
    old_poster = ingestion.store.get(first.id).poster_filename
    site.pages[LINKS[0]] = chronicle_html(poster="/images/posters/new-cover.png")

    def failing_commit():
        raise RuntimeError("connection lost")

    monkeypatch.setattr(ingestion.store, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        orchestrator.fetch_and_upsert_review(LINKS[0], ignore_cache=True)
    monkeypatch.undo()

    assert ingestion.store.get(first.id).poster_filename == old_poster
    assert ingestion.poster_store.exists(old_poster)
    assert [p.name for p in ingestion.poster_store.directory.iterdir()] == [old_poster]


def test_failed_delete_keeps_poster(orchestrator, site, ingestion, monkeypatch):
    outcome = orchestrator.fetch_and_upsert_review(LINKS[0])
    poster = ingestion.store.get(outcome.id).poster_filename

    def failing_commit():
        raise RuntimeError("connection lost")

    monkeypatch.setattr(ingestion.store, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        orchestrator.delete_review(LINKS[0])
    monkeypatch.undo()

    assert ingestion.store.find_by_link(LINKS[0]) is not None
    assert ingestion.poster_store.exists(poster)


def test_metadata_failure_stores_no_poster(orchestrator, site, ingestion, tmdb_client, db_session):
    tmdb_client.resolve_id.side_effect = MetadataLookupError("TMDB returned 401")

    with pytest.raises(MetadataLookupError):
        orchestrator.fetch_and_upsert_review(LINKS[0])

    assert db_session.query(Review).count() == 0
    assert list(ingestion.poster_store.directory.iterdir()) == []
