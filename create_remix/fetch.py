"""Streaming retrieval of template tarballs over HTTP(S).

Responses are never buffered whole: `fetch` hands the caller a file-like view
over the response body so that decompression and tar parsing can start while
the download is still running.
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

import requests

from .exception import NetworkError, NotFoundError, RateLimitError
from .logging import get_logger

logger = get_logger('fetch')

_DOWNLOAD_TIMEOUT_SECONDS = 60
_CHUNK_SIZE = 64 * 1024
_USER_AGENT = 'create-remix'


def _headers(credential: str | None) -> dict[str, str]:
    headers = {'User-Agent': _USER_AGENT}
    if credential:
        headers['Authorization'] = f'token {credential}'
    return headers


def _get(url: str, credential: str | None, *, stream: bool) -> requests.Response:
    try:
        return requests.get(
            url,
            headers=_headers(credential),
            stream=stream,
            timeout=_DOWNLOAD_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise NetworkError(url=url, message=str(e)) from e


def _is_rate_limited(response: requests.Response) -> bool:
    if response.headers.get('X-RateLimit-Remaining') == '0':
        return True
    return 'rate limit' in response.text.lower()


def _check_response(response: requests.Response, url: str) -> None:
    logger.debug('GET %s -> HTTP %s', url, response.status_code)
    if response.status_code == 404:
        raise NotFoundError(url=url)
    if response.status_code in (403, 429) and _is_rate_limited(response):
        raise RateLimitError(url=url)
    if not 200 <= response.status_code < 300:
        raise NetworkError(url=url, message=f'HTTP {response.status_code}')


class _ResponseStream(io.RawIOBase):
    """A read-only raw stream over the chunks of a streamed response."""

    def __init__(self, response: requests.Response, url: str) -> None:
        self._chunks = response.iter_content(chunk_size=_CHUNK_SIZE)
        self._buffer = b''
        self._url = url

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._buffer:
            try:
                self._buffer = next(self._chunks)
            except StopIteration:
                return 0
            except requests.RequestException as e:
                raise NetworkError(url=self._url, message=str(e)) from e
        size = min(len(b), len(self._buffer))
        b[:size] = self._buffer[:size]
        self._buffer = self._buffer[size:]
        return size


@contextmanager
def fetch(tarball_url: str, credential: str | None = None) -> Iterator[BinaryIO]:
    """Open a streamed GET request for a tarball.

    The status of the response is checked before anything is yielded, so a
    missing repository or an exhausted rate limit is reported before the
    caller touches the filesystem.

    Args:
        tarball_url (str): The URL of the archive.
        credential (str | None): A GitHub token sent as an authorization header.

    Yields:
        BinaryIO: A buffered binary stream over the response body.

    Raises:
        NotFoundError: If the server answers 404.
        RateLimitError: If the server answers 403/429 because of a rate limit.
        NetworkError: On transport failures and any other non-2xx response.
    """
    response = _get(tarball_url, credential, stream=True)
    try:
        _check_response(response, tarball_url)
        yield io.BufferedReader(
            _ResponseStream(response, tarball_url), buffer_size=_CHUNK_SIZE
        )
    finally:
        response.close()


def github_path_exists(url: str, credential: str | None = None) -> bool:
    """Check whether a GitHub API resource exists.

    Args:
        url (str): The API URL to check.
        credential (str | None): A GitHub token sent as an authorization header.

    Returns:
        bool: False if the resource is missing, True if it exists.
    """
    response = _get(url, credential, stream=False)
    try:
        if response.status_code == 404:
            logger.debug('GET %s -> HTTP 404', url)
            return False
        _check_response(response, url)
        return True
    finally:
        response.close()
