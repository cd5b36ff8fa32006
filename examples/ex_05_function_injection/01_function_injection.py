"""Function injection with ``Injected[T]`` parameters.

Injected parameters disappear from the public signature and are resolved on
every call. Passing one explicitly by keyword overrides resolution.
"""

from __future__ import annotations

import asyncio
import inspect

from diregistry import DependencyContainer, Injected, inject


class Mailer:
    def __init__(self) -> None:
        self.outbox: list[str] = []

    def send(self, address: str) -> None:
        self.outbox.append(address)


container = DependencyContainer()
container.register(Mailer)


@container.inject
def notify(address: str, mailer: Injected[Mailer]) -> int:
    mailer.send(address)
    return len(mailer.outbox)


@inject(container=container)
async def notify_async(address: str, mailer: Injected[Mailer]) -> int:
    await asyncio.sleep(0)
    mailer.send(address)
    return len(mailer.outbox)


def main() -> None:
    print(f"signature={inspect.signature(notify)}")  # => signature=(address: 'str') -> 'int'
    print(f"sent={notify('ops@example.com')}")  # => sent=1
    print(f"sent_async={asyncio.run(notify_async('dev@example.com'))}")  # => sent_async=2
    print(f"override={notify('qa@example.com', mailer=Mailer())}")  # => override=1


if __name__ == "__main__":
    main()
