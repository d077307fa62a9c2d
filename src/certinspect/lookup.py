"""
Remote certificate metadata lookup.

Queries ssl-checker.io for a hostname through the allorigins relay and
returns the JSON payload verbatim. The payload is not a certificate
and never passes through the parser.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote, urlparse

import aiohttp

from .errors import MetadataLookupError

logger = logging.getLogger(__name__)


@dataclass
class LookupResult:
    """Metadata returned for one hostname."""

    hostname: str
    api_data: Dict[str, Any] = field(default_factory=dict)
    source: str = "url"

    def to_dict(self) -> Dict[str, Any]:
        return {"hostname": self.hostname, "apiData": self.api_data, "source": self.source}


def normalize_hostname(url: str) -> str:
    """
    Extract the hostname from a URL or bare hostname.

    Examples:
        example.com -> example.com
        https://example.com:8443/path -> example.com

    Raises:
        MetadataLookupError: No hostname could be extracted
    """
    url = url.strip()
    if not url:
        raise MetadataLookupError("Please enter a URL")
    full_url = url if url.startswith("http") else f"https://{url}"
    hostname = urlparse(full_url).hostname
    if not hostname:
        raise MetadataLookupError(f"Invalid URL: {url}")
    return hostname


class CertificateMetadataClient:
    """
    Async client for the hostname to certificate metadata service.

    Use as an async context manager so the HTTP session is closed:

        async with CertificateMetadataClient() as client:
            result = await client.lookup("example.com")
    """

    API_URL = "https://ssl-checker.io/api/v1/check/{hostname}"
    RELAY_URL = "https://api.allorigins.win/get?url={url}"

    def __init__(self, timeout: float = 15.0, user_agent: str = "certinspect/1.0"):
        self.timeout = timeout
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "CertificateMetadataClient":
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, hostname: str) -> str:
        api_url = self.API_URL.format(hostname=hostname)
        return self.RELAY_URL.format(url=quote(api_url, safe=""))

    async def lookup(self, url: str) -> LookupResult:
        """
        Fetch metadata for the host named by url.

        Raises:
            MetadataLookupError: Request failed or the response is unusable
        """
        if self._session is None:
            raise MetadataLookupError("Client session is not open")

        hostname = normalize_hostname(url)
        request_url = self.build_url(hostname)
        logger.debug(f"Querying: {request_url}")

        try:
            async with self._session.get(request_url) as response:
                if response.status >= 400:
                    raise MetadataLookupError(
                        f"Failed to fetch certificate data: {response.reason}",
                        error_details={"status": response.status},
                    )
                relay_data = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"HTTP request failed: {e}")
            raise MetadataLookupError(f"Failed to fetch certificate from URL: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"HTTP request timed out after {self.timeout}s")
            raise MetadataLookupError(f"Request timed out after {self.timeout}s") from e
        except json.JSONDecodeError as e:
            raise MetadataLookupError(f"Relay returned invalid JSON: {e}") from e

        # The relay wraps the upstream body in a "contents" string
        contents = relay_data.get("contents") if isinstance(relay_data, dict) else None
        if not contents:
            raise MetadataLookupError("No data received from CORS proxy")

        try:
            api_data = json.loads(contents)
        except json.JSONDecodeError as e:
            raise MetadataLookupError(f"Invalid API response format: {e}") from e
        if not isinstance(api_data, dict):
            raise MetadataLookupError("Invalid API response format")

        return LookupResult(hostname=hostname, api_data=api_data)
