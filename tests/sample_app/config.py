from __future__ import annotations

from autoregister import RegisterAs, auto_register


@auto_register(RegisterAs.SINGLETON)
class AppConfig:
    def __init__(
        self,
        connection_string: str,
        api_key: str,
        debug: bool = False,
        retries: int = 3,
    ) -> None:
        self.connection_string = connection_string
        self.api_key = api_key
        self.debug = debug
        self.retries = retries
