"""Generate accessors for annotated classes and print the generated module.

Mark classes with ``auto_register``, run one build pass, and read the
zero-argument accessor functions produced for them.
"""

from __future__ import annotations

import logging
import sys

from autoregister import RegisterAs, auto_register
from autoregister.build import build_modules
from autoregister.emission import MemoryEmissionSink


@auto_register(RegisterAs.SINGLETON)
class AppConfig:
    def __init__(self, api_key: str, timeout: float = 5.0) -> None:
        self.api_key = api_key
        self.timeout = timeout


@auto_register(RegisterAs.LAZY_SINGLETON)
class HttpClient:
    def __init__(self, config: AppConfig) -> None:
        self.config = config


@auto_register
class WeatherService:
    def __init__(self, client: HttpClient, city: str) -> None:
        self.client = client
        self.city = city


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    sink = MemoryEmissionSink()

    result = build_modules([sys.modules[__name__]], sink=sink)

    print(f"accessors={[accessor.accessor_name for accessor in result.accessors]}")
    # => accessors=['get_app_config', 'get_http_client', 'get_weather_service']
    print(sink.artifacts["__main___accessors"])


if __name__ == "__main__":
    main()
