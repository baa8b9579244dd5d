"""
Text parsing rules for chronicle pages.

Pure functions: each takes the raw text pulled from the page and returns a
typed value, raising ExtractionError (without URL, the caller adds it) when
a required value cannot be parsed.
"""
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil import parser as date_parser

from constants import RARITY_LABELS, Rarity
from ..errors import ExtractionError


LIST_SEPARATOR = re.compile(r",|&|/|\set\s")
YEAR_PATTERN = re.compile(r"(?<!\d)(\d{4})(?!\d)")
DURATION_PATTERN = re.compile(
    r"(?:(?P<hours>\d+)\s*h)?\s*(?:(?P<minutes>\d+)\s*(?:minutes?|min|mn|m)?)?",
    re.IGNORECASE,
)
RARITY_PATTERN = re.compile(r"/\s*(.+)")
FRENCH_DATE_PATTERN = re.compile(
    r"(\d{1,2})(?:er)?\s+([^\W\d_]+)\s+(\d{4})\s*$",
    re.UNICODE,
)
ESCALE_ID_PATTERN = re.compile(r"N°\s*(\d+)")
ESCALE_TITLE_PATTERN = re.compile(r"^\s*(.+?)\s+[-–]\s+")
SEASON_EPISODE_PATTERN = re.compile(
    r"(?:Saison|Season)\s*(\d+)\s*(?:[ÉEé]pisode|Episode)\s*(\d+)",
    re.IGNORECASE,
)


class FrenchParserInfo(date_parser.parserinfo):
    """dateutil parserinfo understanding French month names."""

    MONTHS = [
        ("janv", "janvier"),
        ("févr", "fevr", "février", "fevrier"),
        ("mars",),
        ("avr", "avril"),
        ("mai",),
        ("juin",),
        ("juil", "juillet"),
        ("août", "aout"),
        ("sept", "septembre"),
        ("oct", "octobre"),
        ("nov", "novembre"),
        ("déc", "dec", "décembre", "decembre"),
    ]


_FRENCH_PARSER_INFO = FrenchParserInfo(dayfirst=True)


def parse_info_block(lines: Iterable[str]) -> Dict[str, str]:
    """
    Parse "Label: value" lines into a label -> value map.

    The first colon splits label from value; later colons belong to the value.
    Lines without a colon or with an empty label are ignored.
    """
    infos: Dict[str, str] = {}
    for line in lines:
        label, sep, value = line.partition(":")
        label = label.strip()
        if not sep or not label:
            continue
        infos[label] = value.strip()
    return infos


def split_list(text: str) -> List[str]:
    """Split a multi-valued field on , & / and " et ", trimming each element."""
    return [part.strip() for part in LIST_SEPARATOR.split(text) if part.strip()]


def extract_year(text: Optional[str]) -> Optional[int]:
    """Return the last run of exactly four digits, or None."""
    if not text:
        return None
    matches = YEAR_PATTERN.findall(text)
    if not matches:
        return None
    return int(matches[-1])


def convert_to_minutes(duration: str) -> int:
    """
    Convert a duration string to minutes.

        "2h30"  -> 150
        "2h12m" -> 132
        "1h"    -> 60
        "10m"   -> 10
        "25"    -> 25
    """
    text = (duration or "").strip()
    match = DURATION_PATTERN.fullmatch(text)
    if not text or not match or not (match.group("hours") or match.group("minutes")):
        raise ExtractionError("Invalid duration", raw_text=duration)

    hours = int(match.group("hours") or 0)
    minutes = int(match.group("minutes") or 0)
    return hours * 60 + minutes


def parse_rarity(text: str) -> Rarity:
    """Map "... / <label>" to a Rarity value."""
    match = RARITY_PATTERN.search(text or "")
    if not match:
        raise ExtractionError("Invalid rarity text", raw_text=text)

    label = match.group(1).strip()
    rarity = RARITY_LABELS.get(label)
    if rarity is None:
        raise ExtractionError(f"Invalid rarity rating: {label}", raw_text=text)
    return rarity


def parse_float(text: Optional[str]) -> Optional[float]:
    """Parse a rating such as "3.5" or "3,5"; None when not numeric."""
    if text is None:
        return None
    cleaned = text.strip().replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_french_date(text: str) -> date:
    """Parse the trailing French long date of a string ("... 14 juillet 1994")."""
    match = FRENCH_DATE_PATTERN.search(text or "")
    if not match:
        raise ExtractionError("No date found", raw_text=text)

    day, month, year = match.groups()
    try:
        return date_parser.parse(
            f"{day} {month.lower()} {year}", parserinfo=_FRENCH_PARSER_INFO
        ).date()
    except (ValueError, OverflowError) as e:
        raise ExtractionError(f"Invalid date: {e}", raw_text=text)


def parse_escale_caption(caption: str) -> Tuple[int, str, date]:
    """
    Split an "Escale à Nanarland" caption into (episode id, title, date).

        "Samurai Cop - Escale à Nanarland N°12 - 14 juillet 2020"
        -> (12, "Samurai Cop", date(2020, 7, 14))
    """
    id_match = ESCALE_ID_PATTERN.search(caption or "")
    if not id_match:
        raise ExtractionError("Escale video id not found", raw_text=caption)

    title_match = ESCALE_TITLE_PATTERN.match(caption)
    if not title_match:
        raise ExtractionError("Escale video title not found", raw_text=caption)

    publication_date = parse_french_date(caption)
    return int(id_match.group(1)), title_match.group(1).strip(), publication_date


def parse_nanaroscope_caption(caption: str) -> Tuple[str, str]:
    """
    Split a Nanaroscope caption into (S##E## code, tagline).

        "Saison 2 Episode 5 : Le nanar qui tue" -> ("S02E05", "Le nanar qui tue")
    """
    match = SEASON_EPISODE_PATTERN.search(caption or "")
    if not match:
        raise ExtractionError("Season/episode not found", raw_text=caption)

    season, episode = (int(n) for n in match.groups())
    code = f"S{season:02d}E{episode:02d}"

    _, sep, tagline = caption.partition(":")
    tagline = tagline.strip()
    if not sep or not tagline:
        raise ExtractionError("Nanaroscope tagline not found", raw_text=caption)
    return code, tagline
