"""Client for the exchangeratesapi.io "latest" endpoint."""

from __future__ import annotations

import logging
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests
from pydantic import ValidationError

from fiatconv.models import ErrorResponse, RatesResponse
from fiatconv.provider.base import RateProvider, RateProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE = "https://api.exchangeratesapi.io"


class ExchangeRatesAPI(RateProvider):
    """timeout bounds connecting and each socket read, not the whole request."""

    def __init__(
        self,
        session: requests.Session | None = None,
        base: str = DEFAULT_BASE,
        timeout: float = 10.0,
    ) -> None:
        self._session = session or requests.Session()
        self._base = base
        self._timeout = timeout

    @property
    def base(self) -> str:
        return self._base

    def convert(self, source: str, target: str) -> float:
        url = make_url(self._base, source, target)
        logger.debug("fetching rate %s", url)
        try:
            resp = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise RateProviderError(str(exc)) from exc

        with resp:
            if resp.status_code != requests.codes.ok:
                message = _error_message(resp.content)
                if message:
                    raise RateProviderError(message)
                raise RateProviderError(f"unexpected HTTP status code: {resp.status_code}")
            return decode_rate(resp.content, source, target)


def make_url(base: str, source: str, target: str) -> str:
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        raise RateProviderError(f"invalid base URL: {base!r}")
    query = urlencode({"base": source, "symbols": target})
    return urlunsplit((parts.scheme, parts.netloc, "/latest", query, ""))


def decode_rate(body: bytes | str, source: str, target: str) -> float:
    try:
        response = RatesResponse.model_validate_json(body)
    except ValidationError as exc:
        raise RateProviderError(f"malformed response: {exc.errors()[0]['msg']}") from exc
    if response.base != source:
        raise RateProviderError(f"unexpected base in response: {response.base}")
    try:
        return response.rates[target]
    except KeyError:
        raise RateProviderError("target code not found in response") from None


def _error_message(body: bytes) -> str:
    try:
        return ErrorResponse.model_validate_json(body).error
    except ValidationError:
        return ""
