# src/modules/persona_client.py

import time

import httpx

from src.config import Settings, log
from src.core.errors import MissingCredential, PersonaUnavailable

RAW_CONTENT_TYPE = "application/vnd.github.v3.raw"


class PersonaLoader:
    """
    Fetches the Scribe's persona (a markdown document) from the soul repository.
    With PERSONA_CACHE_TTL at 0 every call goes over the network.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport
        self._cached: str | None = None
        self._cached_at: float = 0

    @property
    def url(self) -> str:
        s = self.settings
        return f"{s.SOUL_REPO_API_URL.rstrip('/')}/repos/{s.SOUL_REPO_OWNER}/{s.SOUL_REPO_NAME}/contents/{s.PERSONA_PATH}"

    def _from_cache(self) -> str | None:
        ttl = self.settings.PERSONA_CACHE_TTL
        if ttl > 0 and self._cached is not None and (time.monotonic() - self._cached_at) < ttl:
            return self._cached
        return None

    async def load_persona(self) -> str:
        token = self.settings.SOUL_REPO_TOKEN
        if not token:
            log.critical("SOUL_REPO_TOKEN is missing. The Scribe has no voice.")
            raise MissingCredential("SOUL_REPO_TOKEN")

        cached = self._from_cache()
        if cached is not None:
            return cached

        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": RAW_CONTENT_TYPE,
        }
        timeout_config = httpx.Timeout(self.settings.PERSONA_TIMEOUT)

        log.info(f"Fetching persona {self.settings.PERSONA_PATH} from {self.settings.SOUL_REPO_OWNER}/{self.settings.SOUL_REPO_NAME}")
        async with httpx.AsyncClient(timeout=timeout_config, transport=self._transport) as client:
            try:
                response = await client.get(self.url, headers=headers)
                response.raise_for_status()
                persona = response.content.decode(response.charset_encoding or "utf-8")
            except httpx.HTTPStatusError as e:
                log.error(f"Soul repository answered {e.response.status_code} for {self.url}")
                raise PersonaUnavailable("The soul repository is unreachable.") from e
            except httpx.TimeoutException as e:
                log.error(f"Timeout fetching the persona from {self.url}: {e}")
                raise PersonaUnavailable("The soul repository is unreachable.") from e
            except (httpx.HTTPError, UnicodeDecodeError, LookupError) as e:
                log.error(f"Failed to fetch the Scribe's doctrine: {e}", exc_info=True)
                raise PersonaUnavailable("The soul repository is unreachable.") from e

        if not persona:
            log.error(f"Soul repository returned an empty document for {self.url}")
            raise PersonaUnavailable("The soul repository returned an empty persona.")

        if self.settings.PERSONA_CACHE_TTL > 0:
            self._cached = persona
            self._cached_at = time.monotonic()
        return persona
