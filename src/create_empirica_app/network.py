"""Best-effort connectivity probe run before installing dependencies."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Mapping
from urllib.parse import urlparse

from .process import CommandRunner, PackageManager

__all__ = ["check_if_online", "get_proxy", "is_reachable", "resolve"]


LOGGER = logging.getLogger(__name__)

_UNSET_PROXY_VALUES = {"", "null", "undefined"}


async def resolve(hostname: str) -> None:
    """Resolve ``hostname`` or raise :class:`OSError`."""

    loop = asyncio.get_running_loop()
    await loop.getaddrinfo(hostname, None)


async def _resolves(hostname: str, timeout: float | None) -> bool:
    try:
        await asyncio.wait_for(resolve(hostname), timeout)
    except (OSError, UnicodeError, asyncio.TimeoutError) as exc:
        LOGGER.debug("Could not resolve %s: %s", hostname, exc)
        return False
    return True


def _proxy_hostname(proxy: str) -> str | None:
    parsed = urlparse(proxy if "//" in proxy else f"//{proxy}")
    return parsed.hostname


async def is_reachable(hostname: str, *, proxy: str | None = None, timeout: float | None = None) -> bool:
    """Return whether ``hostname`` resolves, falling back to the proxy host.

    A configured proxy usually means external names cannot be resolved
    locally, so resolving the proxy itself counts as being online.
    """

    if await _resolves(hostname, timeout):
        return True
    if not proxy:
        return False

    proxy_host = _proxy_hostname(proxy)
    if not proxy_host:
        LOGGER.debug("Ignoring proxy without a hostname: %s", proxy)
        return False
    return await _resolves(proxy_host, timeout)


def get_proxy(runner: CommandRunner, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the HTTPS proxy from the environment or npm's configuration."""

    env = os.environ if environ is None else environ
    for variable in ("https_proxy", "HTTPS_PROXY"):
        if env.get(variable):
            return env[variable]

    output = runner.output(["npm", "config", "get", "https-proxy"])
    if output is None:
        return None
    proxy = output.strip()
    return None if proxy in _UNSET_PROXY_VALUES else proxy


def check_if_online(
    manager: PackageManager,
    runner: CommandRunner,
    *,
    timeout: float | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """Probe the registry of ``manager``; managers that skip the probe are assumed online."""

    if manager.registry_host is None:
        return True
    proxy = get_proxy(runner, environ)
    return asyncio.run(is_reachable(manager.registry_host, proxy=proxy, timeout=timeout))
