"""fiatconv converts between currencies.

Rates come from an exchangeratesapi.io compatible service and are cached
locally for a while to lower the load on the service.
"""

from __future__ import annotations

import logging
import sys

from fiatconv.cache.base import Store
from fiatconv.cache.file import FileStore
from fiatconv.config import Settings, get_settings, resolve_cache_path
from fiatconv.pipeline import App
from fiatconv.provider.exchangerates import ExchangeRatesAPI


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s: %(levelname)s: %(message)s",
    )

    api = ExchangeRatesAPI(base=settings.api_base, timeout=settings.http_timeout_seconds)
    app = App(
        args=sys.argv,
        stdout=sys.stdout,
        stderr=sys.stderr,
        convert=api.convert,
        store=_create_store(settings, sys.argv[0]),
        cache_lifetime=settings.cache_lifetime_seconds,
    )
    code = app.run()
    if code != 0:
        sys.exit(code)


def _create_store(settings: Settings, prog: str) -> Store:
    return FileStore(resolve_cache_path(settings, prog))


if __name__ == "__main__":
    main()
