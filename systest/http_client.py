"""HTTP client factory for proxies talking to the application-under-test."""

import httpx


def create_http_client(
    base_address: str,
    *,
    timeout: float,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """
    Build a Client rooted at the resolved base address.

    A custom transport can be supplied so tests route requests to an
    in-process application instead of the network.
    """
    return httpx.Client(
        base_url=base_address,
        timeout=timeout,
        transport=transport,
    )
