import io
import logging

import pytest

from fiatconv.cache.expiring import Cache
from fiatconv.cache.memory import MemoryStore
from fiatconv.models import ConversionRequest, CurrencyPair
from fiatconv.pipeline import App, ArgumentError, load_cache, parse_arguments
from fiatconv.provider.base import RateProviderError

NOW = 1_600_000_000.0


class FakeProvider:
    def __init__(self, rate=2.0, error=None):
        self.rate = rate
        self.error = error
        self.calls = []

    def convert(self, source, target):
        self.calls.append((source, target))
        if self.error is not None:
            raise RateProviderError(self.error)
        return self.rate


class FailingStore(MemoryStore):
    def open(self, mode):
        if mode == "wb":
            raise PermissionError("read-only cache")
        return super().open(mode)


def make_app(args, provider, store=None, now=NOW):
    return App(
        args=args,
        stdout=io.StringIO(),
        stderr=io.StringIO(),
        convert=provider.convert,
        store=store if store is not None else MemoryStore(),
        clock=lambda: now,
    )


@pytest.mark.parametrize(
    "args,want",
    [
        (["prog", "1", "USD", "AUD"], ConversionRequest(amount=1, source="USD", target="AUD")),
        (["prog", "1", "USD", "AUD", "blah", "blah"], ConversionRequest(amount=1, source="USD", target="AUD")),
        (["prog", "1", "UsD", "aud"], ConversionRequest(amount=1, source="USD", target="AUD")),
        (["prog", "-2.5", "eur", "gbp"], ConversionRequest(amount=-2.5, source="EUR", target="GBP")),
    ],
)
def test_parse_arguments(args, want):
    assert parse_arguments(args) == want


@pytest.mark.parametrize(
    "args,message",
    [
        (["prog"], "too few arguments"),
        (["prog", "1"], "too few arguments"),
        (["prog", "1", "USD"], "too few arguments"),
        (["prog", "a1", "USD", "AUD"], "Invalid amount"),
        (["prog", "1_000", "USD", "AUD"], "Invalid amount"),
        (["prog", " 5 ", "USD", "AUD"], "Invalid amount"),
        (["prog", "5\n", "USD", "AUD"], "Invalid amount"),
        (["prog", "1", "not_valid", "AUD"], "Invalid fiat: not_valid"),
        (["prog", "1", "USD", "not_valid"], "Invalid fiat: not_valid"),
    ],
)
def test_parse_arguments_errors(args, message):
    with pytest.raises(ArgumentError, match=message):
        parse_arguments(args)


def test_no_arguments():
    provider = FakeProvider()
    store = MemoryStore()
    app = make_app(["prog"], provider, store)

    assert app.run() != 0
    assert app.stdout.getvalue() == ""
    assert app.stderr.getvalue().startswith("too few arguments\n\nUsage: fiatconv")
    assert provider.calls == []
    assert store.data is None


def test_conversion_then_cached():
    provider = FakeProvider(rate=2)
    store = MemoryStore()

    app = make_app(["prog", "5", "USD", "AUD"], provider, store)
    assert app.run() == 0
    assert app.stdout.getvalue() == "10.00\n"
    assert app.stderr.getvalue() == ""
    assert provider.calls == [("USD", "AUD")]

    provider.calls.clear()
    app = make_app(["prog", "5", "USD", "AUD"], provider, store)
    assert app.run() == 0
    assert app.stdout.getvalue() == "10.00\n"
    assert app.stderr.getvalue() == ""
    assert provider.calls == []


def test_provider_failure():
    provider = FakeProvider(error="simulated")
    store = MemoryStore()
    app = make_app(["prog", "5", "USD", "GBP"], provider, store)

    assert app.run() == 1
    assert app.stdout.getvalue() == ""
    assert app.stderr.getvalue() == "simulated\n"
    assert provider.calls == [("USD", "GBP")]
    assert store.data is None


def test_direction_is_part_of_key():
    provider = FakeProvider(rate=4)
    store = MemoryStore()
    assert make_app(["prog", "1", "USD", "AUD"], provider, store).run() == 0

    app = make_app(["prog", "1", "AUD", "USD"], provider, store)
    assert app.run() == 0
    assert provider.calls == [("USD", "AUD"), ("AUD", "USD")]


def test_cached_zero_rate_is_refetched():
    cache = Cache()
    cache.set(CurrencyPair(source="USD", target="AUD"), 0.0, int(NOW))
    store = MemoryStore()
    with store.open("wb") as f:
        cache.save(f)

    provider = FakeProvider(rate=1.5)
    app = make_app(["prog", "2", "USD", "AUD"], provider, store)
    assert app.run() == 0
    assert app.stdout.getvalue() == "3.00\n"
    assert provider.calls == [("USD", "AUD")]


def test_expired_rate_is_refetched():
    provider = FakeProvider(rate=2)
    store = MemoryStore()
    assert make_app(["prog", "1", "USD", "AUD"], provider, store).run() == 0

    provider.rate = 3
    app = make_app(["prog", "1", "USD", "AUD"], provider, store, now=NOW + 3600)
    assert app.run() == 0
    assert app.stdout.getvalue() == "2.00\n"

    app = make_app(["prog", "1", "USD", "AUD"], provider, store, now=NOW + 3601)
    assert app.run() == 0
    assert app.stdout.getvalue() == "3.00\n"
    assert len(provider.calls) == 2


def test_corrupt_store_is_ignored():
    provider = FakeProvider(rate=2)
    store = MemoryStore(b"not a cache")
    app = make_app(["prog", "1", "USD", "AUD"], provider, store)

    assert app.run() == 0
    assert app.stdout.getvalue() == "2.00\n"
    assert load_cache(store, 0).get(CurrencyPair(source="USD", target="AUD")) == (2.0, True)


def test_save_failure_is_logged(caplog):
    provider = FakeProvider(rate=2)
    app = make_app(["prog", "1", "USD", "AUD"], provider, FailingStore())

    with caplog.at_level(logging.WARNING, logger="fiatconv.pipeline"):
        assert app.run() == 0
    assert app.stdout.getvalue() == "2.00\n"
    assert app.stderr.getvalue() == ""
    assert "failed to save to cache" in caplog.text
