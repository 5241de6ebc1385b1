"""
Cipherlink - Config Bootstrap

Discovers the current protocol secrets from the target site's own script
bundles:

    1. Try each candidate origin in order; a transport failure skips to the next.
    2. Collect every <script src> on the first origin that has any, resolved
       against that origin. Later origins are not consulted.
    3. Fetch every script; a failed fetch is skipped.
    4. Match each unresolved key's pattern against the script bodies in order;
       the first capture wins and a resolved key is not searched again.
    5. Any key still unresolved fails the whole bootstrap.

Bundles get renamed between releases, so nothing here depends on a file name,
only on the patterns in the plan.
"""

import asyncio
import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .config import BootstrapPlan, ProtocolConfig
from .exceptions import ConfigError, TransportError
from .transport import Transport

logger = logging.getLogger(__name__)


def extract_script_urls(html: str, origin: str) -> list[str]:
    """Every script-source reference in a page, resolved against its origin."""
    soup = BeautifulSoup(html, "html.parser")
    urls = []
    for script in soup.find_all("script", src=True):
        src = script["src"].strip()
        if src:
            urls.append(urljoin(origin, src))
    return urls


def match_patterns(plan: BootstrapPlan, bodies: list[str]) -> dict[str, str]:
    """Resolve plan patterns against script bodies, first capture per key wins.

    A match whose group took no part (an optional group left empty) does not
    resolve the key; the search continues in the same body and the next ones.
    """
    pending = plan.search_patterns()
    resolved: dict[str, str] = {}
    for body in bodies:
        if not pending:
            break
        for key, pattern in list(pending.items()):
            for match in pattern.finditer(body):
                if match.group(1) is not None:
                    resolved[key] = match.group(1)
                    del pending[key]
                    break
    return resolved


class ConfigBootstrap:
    """Runs one discovery pass and returns a ProtocolConfig or raises ConfigError."""

    def __init__(self, plan: BootstrapPlan, transport: Transport) -> None:
        self._plan = plan
        self._transport = transport

    async def discover_scripts(self) -> list[str]:
        """Script URLs of the first origin that serves at least one."""
        for origin in self._plan.origins:
            try:
                html = await self._transport.get_text(origin)
            except TransportError as e:
                logger.warning(f"Origin {origin} unreachable, trying next: {e}")
                continue

            scripts = extract_script_urls(html, origin)
            if scripts:
                logger.info(f"Using origin {origin}: {len(scripts)} scripts")
                return scripts
            logger.warning(f"Origin {origin} has no script references, trying next")

        raise ConfigError("No candidate origin yielded any script", origins=self._plan.origins)

    async def fetch_scripts(self, urls: list[str]) -> list[str]:
        """Fetch script bodies in parallel, keeping order and dropping failures."""
        results = await asyncio.gather(
            *(self._transport.get_text(url) for url in urls),
            return_exceptions=True,
        )
        bodies = []
        for url, result in zip(urls, results):
            if isinstance(result, TransportError):
                logger.warning(f"Skipping script {url}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            bodies.append(result)
        logger.debug(f"Fetched {len(bodies)} of {len(urls)} scripts")
        return bodies

    async def run(self) -> ProtocolConfig:
        logger.info(f"Bootstrap started: {len(self._plan.origins)} origins, {len(self._plan.patterns)} patterns")

        values = dict(self._plan.static)
        if self._plan.search_patterns():
            scripts = await self.discover_scripts()
            bodies = await self.fetch_scripts(scripts)
            values.update(match_patterns(self._plan, bodies))

        for key in self._plan.patterns:
            if key not in values:
                raise ConfigError(f"No script matched the pattern for {key}", config_key=key)

        config = ProtocolConfig.from_mapping(values)
        logger.info(f"Bootstrap finished: {config.masked()}")
        return config


async def bootstrap(plan: BootstrapPlan, transport: Transport) -> ProtocolConfig:
    """Convenience wrapper around ConfigBootstrap.run()."""
    return await ConfigBootstrap(plan, transport).run()


class ConfigProvider:
    """Holds the current ProtocolConfig behind a single-writer refresh.

    Callers only ever see a fully bootstrapped config: a new one replaces the
    old only after its bootstrap succeeds, and a failed refresh leaves the
    previous config in place.
    """

    def __init__(self, plan: BootstrapPlan, transport: Transport) -> None:
        self._plan = plan
        self._transport = transport
        self._config: ProtocolConfig | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> ProtocolConfig | None:
        return self._config

    async def get(self) -> ProtocolConfig:
        """Return the config, bootstrapping on first use."""
        if self._config is not None:
            return self._config
        async with self._lock:
            if self._config is None:
                self._config = await bootstrap(self._plan, self._transport)
            return self._config

    async def refresh(self) -> ProtocolConfig:
        """Re-run bootstrap and publish the result."""
        async with self._lock:
            config = await bootstrap(self._plan, self._transport)
            self._config = config
            return config
