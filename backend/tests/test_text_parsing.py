from datetime import date

import pytest

from constants import Rarity
from scrapers.errors import ExtractionError
from scrapers.utils.text_parsing import (
    convert_to_minutes,
    extract_year,
    parse_escale_caption,
    parse_float,
    parse_french_date,
    parse_info_block,
    parse_nanaroscope_caption,
    parse_rarity,
    split_list,
)


@pytest.mark.parametrize("text,expected", [
    ("2h30", 150),
    ("1h", 60),
    ("10m", 10),
    ("25", 25),
    ("2h12m", 132),
    ("1 h 36 min", 96),
])
def test_convert_to_minutes(text, expected):
    assert convert_to_minutes(text) == expected


@pytest.mark.parametrize("text", ["", "environ deux heures", "h"])
def test_convert_to_minutes_rejects_garbage(text):
    with pytest.raises(ExtractionError) as exc:
        convert_to_minutes(text)
    assert exc.value.raw_text == text


def test_extract_year_takes_last_four_digit_run():
    assert extract_year("Sorti le 14 juillet 1994") == 1994
    assert extract_year("1989 (tourné en 1987)") == 1987


def test_extract_year_absent_is_none():
    assert extract_year("no digits here") is None
    assert extract_year(None) is None
    assert extract_year("réf. 123456") is None


def test_parse_rarity_all_labels():
    cases = {
        "Courant": Rarity.COMMON,
        "Trouvable": Rarity.FINDABLE,
        "Rare": Rarity.RARE,
        "Exotique": Rarity.EXOTIC,
        "Pièce de Collection": Rarity.COLLECTORS_ITEM,
        "Introuvable": Rarity.UNFINDABLE,
        "Jamais Sorti": Rarity.NEVER_RELEASED,
    }
    for label, rarity in cases.items():
        assert parse_rarity(f"Cote de rareté / {label}") is rarity


@pytest.mark.parametrize("text", ["x / Unknown", "Trouvable"])
def test_parse_rarity_failures(text):
    with pytest.raises(ExtractionError):
        parse_rarity(text)


def test_parse_info_block_splits_on_first_colon():
    infos = parse_info_block([
        "Titre original : Samurai Cop",
        "Durée: 1h36",
        "Titre(s) alternatif(s) : Cop : Le Retour",
        "pas de label ici",
    ])
    assert infos == {
        "Titre original": "Samurai Cop",
        "Durée": "1h36",
        "Titre(s) alternatif(s)": "Cop : Le Retour",
    }


def test_split_list_separators():
    assert split_list("Etats-Unis, Italie & France / Turquie et Inde") == [
        "Etats-Unis", "Italie", "France", "Turquie", "Inde",
    ]
    # "et" inside a word is not a separator
    assert split_list("Robert Metcalfe") == ["Robert Metcalfe"]


def test_parse_float_accepts_comma():
    assert parse_float("3,5") == 3.5
    assert parse_float(" 4 ") == 4.0
    assert parse_float("-") is None
    assert parse_float(None) is None


def test_parse_french_date():
    assert parse_french_date("publié le 1er août 2019") == date(2019, 8, 1)
    assert parse_french_date("14 juillet 1994") == date(1994, 7, 14)
    with pytest.raises(ExtractionError):
        parse_french_date("bientôt")


def test_parse_escale_caption():
    caption = "Samurai Cop - Escale à Nanarland N°12 - 14 juillet 2020"
    assert parse_escale_caption(caption) == (12, "Samurai Cop", date(2020, 7, 14))


def test_parse_escale_caption_missing_id():
    with pytest.raises(ExtractionError):
        parse_escale_caption("Samurai Cop - Escale à Nanarland - 14 juillet 2020")


def test_parse_nanaroscope_caption():
    assert parse_nanaroscope_caption("Saison 2 Episode 5 : Le nanar qui tue") == (
        "S02E05", "Le nanar qui tue",
    )
    assert parse_nanaroscope_caption("Season 10 Episode 12: Final")[0] == "S10E12"


def test_parse_nanaroscope_caption_requires_tagline():
    with pytest.raises(ExtractionError):
        parse_nanaroscope_caption("Saison 2 Episode 5")
