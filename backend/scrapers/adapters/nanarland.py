"""
Nanarland Adapter - chronicle pages of nanarland.com

Every getter is a plain function of the rendered document (plus the base
URL when links need resolving). Required getters raise ExtractionError with
the page URL; optional ones (creation year, original title, alternative
titles, release year) return None.
"""
import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin

from constants import (
    CHRONICLES_INDEX_PATH,
    INFO_ALTERNATIVE_TITLES,
    INFO_DIRECTORS,
    INFO_ORIGIN_COUNTRIES,
    INFO_ORIGINAL_TITLE,
    INFO_RELEASE_YEAR,
    INFO_RUNTIME,
    NO_ALTERNATIVE_TITLE,
    Rarity,
)

from ..base import BaseScraper
from ..dom import HtmlDocument
from ..errors import ExtractionError
from ..records import (
    RawCutVideo,
    RawEscaleVideo,
    RawGenre,
    RawMediaLink,
    RawNanaroscopeVideo,
    RawReview,
    RawUser,
    RawUserRating,
)
from ..utils.text_parsing import (
    convert_to_minutes,
    extract_year,
    parse_escale_caption,
    parse_float,
    parse_info_block,
    parse_nanaroscope_caption,
    parse_rarity,
    split_list,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Selectors
# =============================================================================

CHRONICLE_LINK_SELECTOR = "a.itemFigure.titlePrimary"

MAIN_TITLE_SELECTOR = "h1.mainTitle"
GENRE_SELECTOR = "body > main > div.mainInner > nav > ol > li:nth-child(3) > a"
SUBGENRE_SELECTOR = "body > main > div.mainInner > nav > ol > li:nth-child(4) > a"
CREATION_YEAR_SELECTOR = "body > main > div.mainInner > div > div:nth-child(1) > small"
INFOS_SELECTOR = (
    "body > main > div.mainInner > div > div:nth-child(1) > div.row"
    " > div.col-12.col-md-8.col-lg-8 > p"
)
POSTER_SELECTOR = (
    "body > main > div.mainInner > div > div:nth-child(1) > div.row"
    " > div.col-12.col-md-4.col-lg-4.mb-3.mb-md-0 > img"
)

AUTHOR_NAME_SELECTOR = "#auteur .userName"
AUTHOR_AVATAR_SELECTOR = "#auteur img.avatar"

AVERAGE_RATING_SELECTOR = (
    "#notes > div.d-inline-block.bg-primary.text-white.font-weight-bold.py-3.px-4.mb-1 > span"
)
USER_RATING_ROW_SELECTOR = "#notes ul.notesMembres > li"
RARITY_SELECTOR = "#cote-rarete > h3"

CUT_VIDEO_SELECTOR = "#extraits .videoItem"
ESCALE_VIDEO_SELECTOR = "#escales a.escaleItem"
NANAROSCOPE_VIDEO_SELECTOR = "#nanaroscope .nanaroscopeItem"


def _required(value: Optional[str], what: str, document: HtmlDocument) -> str:
    if value is None or not value.strip():
        raise ExtractionError(f"{what} not found", url=document.url)
    return value.strip()


def _required_info(infos: Dict[str, str], label: str, document: HtmlDocument) -> str:
    value = infos.get(label)
    if not value:
        raise ExtractionError(f"Info '{label}' not found", url=document.url)
    return value


# =============================================================================
# Index page
# =============================================================================

def extract_chronicle_links(document: HtmlDocument, base_url: str) -> List[str]:
    """Absolute chronicle URLs listed on the index, in page order, deduplicated."""
    links = []
    seen = set()
    for anchor in document.select_all(CHRONICLE_LINK_SELECTOR):
        href = anchor.attr("href")
        if not href:
            continue
        link = urljoin(base_url + "/", href)
        if link not in seen:
            seen.add(link)
            links.append(link)

    if not links:
        raise ExtractionError("No chronicle link found", url=document.url)
    return links


# =============================================================================
# Chronicle page - header
# =============================================================================

def get_main_title(document: HtmlDocument) -> str:
    return _required(document.select_text(MAIN_TITLE_SELECTOR), "Main title", document)


def _get_breadcrumb_genre(document: HtmlDocument, selector: str, what: str, base_url: str) -> RawGenre:
    title = _required(document.select_text(selector), f"{what} name", document)
    href = _required(document.select_attr(selector, "href"), f"{what} link", document)
    return RawGenre(title=title, link=urljoin(base_url + "/", href))


def get_genre(document: HtmlDocument, base_url: str) -> RawGenre:
    return _get_breadcrumb_genre(document, GENRE_SELECTOR, "Genre", base_url)


def get_subgenre(document: HtmlDocument, base_url: str) -> RawGenre:
    return _get_breadcrumb_genre(document, SUBGENRE_SELECTOR, "Sub genre", base_url)


def get_creation_year(document: HtmlDocument) -> Optional[int]:
    text = document.select_text(CREATION_YEAR_SELECTOR)
    year = extract_year(text)
    if year is None:
        logger.info(f"No publication year available ({document.url})")
    return year


def get_poster_url(document: HtmlDocument, base_url: str) -> str:
    src = _required(document.select_attr(POSTER_SELECTOR, "src"), "Poster", document)
    return urljoin(base_url + "/", src)


# =============================================================================
# Chronicle page - info block
# =============================================================================

def get_infos(document: HtmlDocument) -> Dict[str, str]:
    lines = document.select_all_text(INFOS_SELECTOR)
    infos = parse_info_block(lines)
    logger.debug(f"Movie infos ({document.url}): {infos}")
    return infos


def get_original_title(infos: Dict[str, str]) -> Optional[str]:
    return infos.get(INFO_ORIGINAL_TITLE) or None


def get_alternative_titles(infos: Dict[str, str]) -> Optional[List[str]]:
    text = infos.get(INFO_ALTERNATIVE_TITLES)
    if not text or text == NO_ALTERNATIVE_TITLE:
        return None
    return split_list(text)


def get_directors(infos: Dict[str, str], document: HtmlDocument) -> List[str]:
    return split_list(_required_info(infos, INFO_DIRECTORS, document))


def get_release_year(infos: Dict[str, str]) -> Optional[int]:
    return extract_year(infos.get(INFO_RELEASE_YEAR))


def get_origin_countries(infos: Dict[str, str], document: HtmlDocument) -> List[str]:
    return split_list(_required_info(infos, INFO_ORIGIN_COUNTRIES, document))


def get_runtime(infos: Dict[str, str], document: HtmlDocument) -> int:
    text = _required_info(infos, INFO_RUNTIME, document)
    try:
        return convert_to_minutes(text)
    except ExtractionError as e:
        raise e.with_url(document.url)


# =============================================================================
# Chronicle page - ratings
# =============================================================================

def get_average_rating(document: HtmlDocument) -> float:
    text = _required(document.select_text(AVERAGE_RATING_SELECTOR), "Average rating", document)
    rating = parse_float(text)
    if rating is None:
        raise ExtractionError("Average rating is not a number", url=document.url, raw_text=text)
    return rating


def get_rarity(document: HtmlDocument) -> Rarity:
    text = _required(document.select_text(RARITY_SELECTOR), "Rarity rating", document)
    try:
        return parse_rarity(text)
    except ExtractionError as e:
        raise e.with_url(document.url)


def get_author(document: HtmlDocument, base_url: str) -> RawUser:
    username = _required(document.select_text(AUTHOR_NAME_SELECTOR), "Author name", document)
    avatar = document.select_attr(AUTHOR_AVATAR_SELECTOR, "src")
    return RawUser(
        username=username,
        avatar_url=urljoin(base_url + "/", avatar) if avatar else None,
    )


def get_user_ratings(document: HtmlDocument, base_url: str) -> List[RawUserRating]:
    ratings = []
    for row in document.select_all(USER_RATING_ROW_SELECTOR):
        username = _required(row.select_text(".userName"), "Rating username", document)
        avatar = row.select_attr("img.avatar", "src")
        ratings.append(RawUserRating(
            user=RawUser(
                username=username,
                avatar_url=urljoin(base_url + "/", avatar) if avatar else None,
            ),
            rating=parse_float(row.select_text(".note")),
        ))
    return ratings


# =============================================================================
# Chronicle page - videos
# =============================================================================

def get_cut_videos(document: HtmlDocument, base_url: str) -> List[RawCutVideo]:
    videos = []
    for item in document.select_all(CUT_VIDEO_SELECTOR):
        video_id = item.attr("data-video-id")
        if not video_id or not video_id.isdigit():
            raise ExtractionError("Cut video id missing or not numeric", url=document.url, raw_text=item.text)

        title = _required(item.select_text(".videoTitle"), "Cut video title", document)

        rating_text = item.select_text(".videoNote")
        average_rating = parse_float(rating_text)
        if average_rating is None:
            raise ExtractionError("Cut video rating not a number", url=document.url, raw_text=rating_text)

        media_links = []
        for source in item.select_all("video source"):
            src, media_type = source.attr("src"), source.attr("type")
            if not src or not media_type:
                raise ExtractionError("Cut video source incomplete", url=document.url, raw_text=source.html)
            media_links.append(RawMediaLink(src=urljoin(base_url + "/", src), type=media_type))
        if not media_links:
            raise ExtractionError("Cut video has no media link", url=document.url, raw_text=item.text)

        videos.append(RawCutVideo(
            id=int(video_id),
            title=title,
            average_rating=average_rating,
            media_links=media_links,
        ))
    return videos


def get_escale_videos(document: HtmlDocument, base_url: str) -> List[RawEscaleVideo]:
    videos = []
    for item in document.select_all(ESCALE_VIDEO_SELECTOR):
        page_link = _required(item.attr("href"), "Escale video link", document)
        caption = _required(item.select_text(".caption"), "Escale video caption", document)
        try:
            video_id, title, publication_date = parse_escale_caption(caption)
        except ExtractionError as e:
            raise e.with_url(document.url)
        videos.append(RawEscaleVideo(
            id=video_id,
            title=title,
            page_link=urljoin(base_url + "/", page_link),
            publication_date=publication_date,
        ))
    return videos


def get_nanaroscope_videos(document: HtmlDocument) -> List[RawNanaroscopeVideo]:
    videos = []
    for item in document.select_all(NANAROSCOPE_VIDEO_SELECTOR):
        caption = _required(item.select_text(".caption"), "Nanaroscope caption", document)
        try:
            code, tagline = parse_nanaroscope_caption(caption)
        except ExtractionError as e:
            raise e.with_url(document.url)
        videos.append(RawNanaroscopeVideo(season_episode_code=code, tagline=tagline))
    return videos


# =============================================================================
# Whole page
# =============================================================================

def extract_review(document: HtmlDocument, base_url: str) -> RawReview:
    """Build the RawReview of a chronicle page."""
    infos = get_infos(document)

    review = RawReview(
        link=document.url,
        title=get_main_title(document),
        genre=get_genre(document, base_url),
        subgenre=get_subgenre(document, base_url),
        creation_year=get_creation_year(document),
        original_title=get_original_title(infos),
        alternative_titles=get_alternative_titles(infos),
        directors=get_directors(infos, document),
        release_year=get_release_year(infos),
        origin_countries=get_origin_countries(infos, document),
        runtime_minutes=get_runtime(infos, document),
        poster_url=get_poster_url(document, base_url),
        average_rating=get_average_rating(document),
        rarity=get_rarity(document),
        author=get_author(document, base_url),
        user_ratings=get_user_ratings(document, base_url),
        cut_videos=get_cut_videos(document, base_url),
        escale_videos=get_escale_videos(document, base_url),
        nanaroscope_videos=get_nanaroscope_videos(document),
    )
    logger.debug(f"{review.title} data: {review}")
    return review


class NanarlandScraper(BaseScraper):
    """Extractor for nanarland.com chronicles."""

    SCRAPER_NAME = "nanarland"
    SOURCE_DOMAIN = "nanarland.com"
    INDEX_PATH = CHRONICLES_INDEX_PATH

    def extract_links(self, document: HtmlDocument) -> List[str]:
        return extract_chronicle_links(document, self.base_url)

    def extract(self, document: HtmlDocument) -> RawReview:
        return extract_review(document, self.base_url)
