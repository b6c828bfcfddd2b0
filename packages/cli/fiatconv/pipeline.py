from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TextIO

from fiatconv.cache import codec
from fiatconv.cache.base import CacheError, Store
from fiatconv.cache.expiring import Cache
from fiatconv.models import ConversionRequest, CurrencyPair
from fiatconv.provider.base import RateProviderError

logger = logging.getLogger(__name__)

FIAT_NAME_LENGTH = 3
CACHE_LIFETIME_SECONDS = 60 * 60

USAGE = """Usage: fiatconv <amount> <from_fiat> <to_fiat>

This utility converts "amount" of money in "from_fiat" currency to amount in
"to_fiat" currency. Both currencies are given as ISO 4217 code (eg. USD)."""

codec.register(CurrencyPair)


class ArgumentError(ValueError):
    pass


def parse_arguments(args: Sequence[str]) -> ConversionRequest:
    if len(args) < 4:
        raise ArgumentError("too few arguments")
    if "_" in args[1] or args[1] != args[1].strip():
        raise ArgumentError(f"Invalid amount: {args[1]!r}")
    try:
        amount = float(args[1])
    except ValueError as exc:
        raise ArgumentError(f"Invalid amount: {exc}") from exc
    for fiat in args[2:4]:
        if len(fiat) != FIAT_NAME_LENGTH:
            raise ArgumentError(f"Invalid fiat: {fiat}")
    return ConversionRequest(amount=amount, source=args[2].upper(), target=args[3].upper())


def print_usage(stream: TextIO) -> None:
    print(USAGE, file=stream)


def load_cache(store: Store, cutoff: int) -> Cache:
    try:
        with store.open("rb") as f:
            return Cache.load(f, cutoff)
    except OSError as exc:
        logger.debug("cache not loaded: %s", exc)
        return Cache()


def save_cache(cache: Cache, store: Store) -> None:
    try:
        with store.open("wb") as f:
            cache.save(f)
    except (OSError, CacheError) as exc:
        logger.warning("failed to save to cache: %s", exc)


@dataclass
class App:
    args: Sequence[str]
    stdout: TextIO
    stderr: TextIO
    convert: Callable[[str, str], float]
    store: Store
    cache_lifetime: float = CACHE_LIFETIME_SECONDS
    clock: Callable[[], float] = time.time

    def run(self) -> int:
        try:
            req = parse_arguments(self.args)
        except ArgumentError as exc:
            print(f"{exc}\n", file=self.stderr)
            print_usage(self.stderr)
            return 1

        now = self.clock()
        cache = load_cache(self.store, int(now - self.cache_lifetime))
        key = CurrencyPair(source=req.source, target=req.target)

        rate = 0.0
        value, ok = cache.get(key)
        if ok and isinstance(value, (int, float)) and not isinstance(value, bool):
            rate = float(value)

        # a cached zero is indistinguishable from a miss
        if rate == 0:
            logger.debug("cache miss for %s/%s", req.source, req.target)
            try:
                rate = float(self.convert(req.source, req.target))
            except RateProviderError as exc:
                print(exc, file=self.stderr)
                return 1
            cache.set(key, rate, int(now))
            save_cache(cache, self.store)
        else:
            logger.debug("cache hit for %s/%s", req.source, req.target)

        print(f"{rate * req.amount:.2f}", file=self.stdout)
        return 0
