from datetime import date

import pytest

from constants import Rarity
from scrapers.adapters import NanarlandScraper
from scrapers.adapters.nanarland import (
    extract_chronicle_links,
    get_alternative_titles,
    get_infos,
    get_runtime,
)
from scrapers.dom import HtmlDocument
from scrapers.errors import ExtractionError

from nanarland_pages import BASE_URL, INDEX_URL, chronicle_html, chronicle_link, index_html

LINK = chronicle_link("samurai-cop")


@pytest.fixture
def scraper():
    return NanarlandScraper(BASE_URL)


def _extract(scraper, **overrides):
    return scraper.extract(HtmlDocument(LINK, chronicle_html(**overrides)))


def test_index_links_absolute_and_deduplicated(scraper):
    links = [chronicle_link("a"), chronicle_link("b"), chronicle_link("a")]
    document = HtmlDocument(INDEX_URL, index_html(links))

    assert scraper.index_url == INDEX_URL
    assert scraper.extract_links(document) == [chronicle_link("a"), chronicle_link("b")]


def test_index_without_links_fails():
    document = HtmlDocument(INDEX_URL, "<html><body></body></html>")
    with pytest.raises(ExtractionError) as exc:
        extract_chronicle_links(document, BASE_URL)
    assert exc.value.url == INDEX_URL


def test_extract_full_chronicle(scraper):
    raw = _extract(scraper)

    assert raw.link == LINK
    assert raw.title == "Samurai Cop"
    assert raw.original_title == "Samurai Cop"
    assert raw.alternative_titles is None
    assert raw.directors == ["Amir Shervan"]
    assert raw.release_year == 1991
    assert raw.creation_year == 2004
    assert raw.origin_countries == ["Etats-Unis"]
    assert raw.runtime_minutes == 96
    assert raw.rarity is Rarity.FINDABLE
    assert raw.average_rating == 3.5
    assert raw.poster_url == f"{BASE_URL}/images/posters/samurai-cop.jpg"

    assert raw.genre.title == "Action"
    assert raw.genre.link == f"{BASE_URL}/chroniques/nanars/action.html"
    assert raw.subgenre.title == "Flics"
    assert raw.subgenre.link == f"{BASE_URL}/chroniques/nanars/action/flics.html"

    assert raw.author.username == "Kobal"
    assert raw.author.avatar_url == f"{BASE_URL}/images/avatars/kobal.png"


def test_user_ratings_keep_non_numeric_as_none(scraper):
    raw = _extract(scraper)

    assert [(r.user.username, r.rating) for r in raw.user_ratings] == [
        ("Drexl", 4.0),
        ("Jack Tillman", 3.5),
        ("Labroche", None),
    ]
    assert raw.user_ratings[1].user.avatar_url == f"{BASE_URL}/images/avatars/jack-tillman.png"


def test_videos(scraper):
    raw = _extract(scraper)

    cut = raw.cut_videos[0]
    assert (cut.id, cut.title, cut.average_rating) == (1234, "La bagarre finale", 4.0)
    assert cut.media_links[0].src == f"{BASE_URL}/videos/1234.mp4"
    assert cut.media_links[0].type == "video/mp4"

    escale = raw.escale_videos[0]
    assert escale.id == 12
    assert escale.title == "Samurai Cop"
    assert escale.page_link == f"{BASE_URL}/escales/12"
    assert escale.publication_date == date(2020, 7, 14)

    nanaroscope = raw.nanaroscope_videos[0]
    assert nanaroscope.season_episode_code == "S02E05"
    assert nanaroscope.tagline == "Le nanar qui tue"


def test_optional_fields_absent(scraper):
    raw = _extract(
        scraper,
        published="Chronique publiée il y a longtemps",
        infos=(
            "Réalisateur(s) : Cirio H. Santiago & Teddy Page",
            "Nationalité : Philippines / Etats-Unis",
            "Durée : 85",
        ),
        user_ratings=(),
        cut_videos=(),
        escale_videos=(),
        nanaroscope_videos=(),
    )

    assert raw.creation_year is None
    assert raw.original_title is None
    assert raw.alternative_titles is None
    assert raw.release_year is None
    assert raw.directors == ["Cirio H. Santiago", "Teddy Page"]
    assert raw.origin_countries == ["Philippines", "Etats-Unis"]
    assert raw.runtime_minutes == 85
    assert raw.user_ratings == []
    assert raw.cut_videos == []
    assert raw.lookup_title == "Samurai Cop"


def test_alternative_titles_split():
    infos = {"Titre(s) alternatif(s)": "Samurai Cop 2 / Le Flic Samouraï"}
    assert get_alternative_titles(infos) == ["Samurai Cop 2", "Le Flic Samouraï"]


def test_missing_title_reports_url(scraper):
    with pytest.raises(ExtractionError) as exc:
        _extract(scraper, title="")
    assert exc.value.url == LINK
    assert "Main title" in str(exc.value)


def test_unknown_rarity_fails(scraper):
    with pytest.raises(ExtractionError) as exc:
        _extract(scraper, rarity="Cote de rareté / Légendaire")
    assert exc.value.url == LINK
    assert exc.value.raw_text == "Cote de rareté / Légendaire"


def test_bad_runtime_fails_with_raw_text():
    document = HtmlDocument(LINK, chronicle_html(infos=("Durée : environ 2 heures",)))
    infos = get_infos(document)
    with pytest.raises(ExtractionError) as exc:
        get_runtime(infos, document)
    assert exc.value.url == LINK
    assert exc.value.raw_text == "environ 2 heures"


def test_missing_required_info_fails(scraper):
    with pytest.raises(ExtractionError) as exc:
        _extract(scraper, infos=("Durée : 1h30",))
    assert "Réalisateur(s)" in str(exc.value)


def test_cut_video_without_source_fails(scraper):
    with pytest.raises(ExtractionError):
        _extract(scraper, cut_videos=((77, "Sans source", "3", "", "video/mp4"),))


def test_cut_video_non_numeric_id_fails(scraper):
    with pytest.raises(ExtractionError):
        _extract(scraper, cut_videos=(("abc", "Titre", "3", "/v.mp4", "video/mp4"),))


def test_escale_without_date_fails(scraper):
    with pytest.raises(ExtractionError) as exc:
        _extract(scraper, escale_videos=(("/escales/3", "Titre - Escale à Nanarland N°3"),))
    assert exc.value.url == LINK
