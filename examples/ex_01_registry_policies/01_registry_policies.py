"""Registry policies: factory, singleton and lazy singleton, sync and async.

Register producers directly on a ``Registry`` and see which policies share an
instance and when each producer runs.
"""

from __future__ import annotations

import asyncio

from autoregister import RegisterAs, Registry


class Clock:
    pass


class Database:
    def __init__(self) -> None:
        print("database created")


class Cache:
    pass


async def create_cache() -> Cache:
    await asyncio.sleep(0)
    return Cache()


async def main() -> None:
    registry = Registry()

    first = registry.get_or_register(Clock, Clock, RegisterAs.FACTORY)
    second = registry.get_or_register(Clock, Clock, RegisterAs.FACTORY)
    print(f"factory_shared={first is second}")  # => factory_shared=False

    registry.register(Database, Database, RegisterAs.LAZY_SINGLETON)
    print("database registered")  # => database registered
    database = registry.get(Database)  # => database created
    print(f"lazy_shared={database is registry.get(Database)}")  # => lazy_shared=True

    caches = await asyncio.gather(
        *(
            registry.get_or_register_async(Cache, create_cache, RegisterAs.LAZY_SINGLETON_ASYNC)
            for _ in range(3)
        ),
    )
    print(f"single_flight={all(cache is caches[0] for cache in caches)}")  # => single_flight=True
    print(f"state={registry.state(Cache).value}")  # => state=registered_async_resolved


if __name__ == "__main__":
    asyncio.run(main())
