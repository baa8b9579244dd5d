from datetime import date

from utils.cache_key import build_query_cache_key, derive_page_cache_key


def test_build_query_cache_key_sorts_and_skips_empty():
    params = {
        "language": "fr-FR",
        "id": 42,
        "empty": "",
        "when": date(2024, 5, 1),
    }

    key = build_query_cache_key("tmdb:movie", params)

    assert key == "tmdb:movie:id=42&language=fr-FR&when=2024-05-01"


def test_page_cache_key_drops_scheme_host_and_extension():
    key = derive_page_cache_key(
        "https://www.nanarland.com/chroniques/nanars/action/samurai-cop.html", "nanarland"
    )
    assert key == "nanarland:chroniques:nanars:action:samurai-cop"


def test_page_cache_key_is_host_independent():
    a = derive_page_cache_key("https://www.nanarland.com/chroniques/a.html", "nanarland")
    b = derive_page_cache_key("http://nanarland.com/chroniques/a.html", "nanarland")
    assert a == b


def test_page_cache_key_distinct_documents_distinct_keys():
    urls = [
        "https://www.nanarland.com/chroniques/toutes-nos-chroniques.html",
        "https://www.nanarland.com/chroniques/nanars/action/samurai-cop.html",
        "https://www.nanarland.com/chroniques/nanars/action/samurai-cop-2.html",
        "https://www.nanarland.com/chroniques/nanars/action.html",
        "https://www.nanarland.com/chroniques/nanars/action.html?page=2",
    ]
    keys = {derive_page_cache_key(url, "nanarland") for url in urls}
    assert len(keys) == len(urls)


def test_page_cache_key_namespace_prefix():
    key = derive_page_cache_key("https://www.nanarland.com/index.php", "other")
    assert key == "other:index"


def test_page_cache_key_delimiter_inside_segment_does_not_collide():
    nested = derive_page_cache_key("https://www.nanarland.com/a/b.html", "nanarland")
    colon = derive_page_cache_key("https://www.nanarland.com/a:b.html", "nanarland")
    assert nested == "nanarland:a:b"
    assert colon == "nanarland:a%3Ab"
