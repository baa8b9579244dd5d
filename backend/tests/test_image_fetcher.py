from unittest.mock import MagicMock

import pytest
import requests

from scrapers.errors import TransientFetchError
from services.image_fetcher import ImageFetcher

URL = "https://www.nanarland.com/images/posters/samurai-cop.jpg"


def _response(content=b"jpeg-bytes", status=200):
    response = MagicMock()
    response.content = content
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error")
    return response


def _fetcher(session, **kwargs):
    sleeps = []
    fetcher = ImageFetcher(session=session, sleep=sleeps.append, backoff_seconds=2, **kwargs)
    return fetcher, sleeps


def test_fetch_returns_bytes():
    session = MagicMock()
    session.get.return_value = _response()
    fetcher, sleeps = _fetcher(session, timeout=10)

    assert fetcher.fetch(URL) == b"jpeg-bytes"
    session.get.assert_called_once_with(URL, timeout=10)
    assert sleeps == []


def test_fetch_retries_then_succeeds():
    session = MagicMock()
    session.get.side_effect = [
        requests.exceptions.ConnectionError("reset"),
        _response(status=503),
        _response(b"ok"),
    ]
    fetcher, sleeps = _fetcher(session)

    assert fetcher.fetch(URL) == b"ok"
    assert session.get.call_count == 3
    assert sleeps == [2, 2]


def test_fetch_gives_up_after_three_retries():
    session = MagicMock()
    session.get.side_effect = requests.exceptions.Timeout("slow")
    fetcher, sleeps = _fetcher(session, max_retries=3)

    with pytest.raises(TransientFetchError) as exc:
        fetcher.fetch(URL)

    assert session.get.call_count == 4
    assert exc.value.attempts == 4
    assert exc.value.url == URL
    assert len(sleeps) == 3


def test_redirect_limit_applied_to_session():
    session = MagicMock()
    ImageFetcher(session=session, max_redirects=5)
    assert session.max_redirects == 5
