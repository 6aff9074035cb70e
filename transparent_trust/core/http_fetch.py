"""
URL content fetching for skill and customer source material.

Fetches are guarded against server-side request forgery: only http(s)
URLs whose host resolves exclusively to public addresses are fetched.
Redirects are followed by hand so every hop passes the same check.
"""

from __future__ import annotations

import asyncio
import ipaddress
import socket
from typing import Optional
from urllib.parse import urlparse

import httpx

from transparent_trust.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_LENGTH = 15000
DEFAULT_USER_AGENT = "TransparentTrust/1.0"
DEFAULT_TIMEOUT = 20.0
MAX_REDIRECTS = 5

_BLOCKED_HOSTNAMES = {"localhost", "metadata.google.internal"}


def is_public_address(address: str) -> bool:
    """Whether ``address`` is a globally routable IP address."""
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


async def validate_url(url: str) -> Optional[str]:
    """
    Check a URL against the SSRF rules.

    Returns:
        None when the URL may be fetched, otherwise the reason it may not.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return f"Unsupported URL scheme: {parsed.scheme or '(none)'}"
    host = parsed.hostname
    if not host:
        return "URL has no host"
    if host.lower() in _BLOCKED_HOSTNAMES:
        return f"Host is not allowed: {host}"

    try:
        ipaddress.ip_address(host)
        addresses = [host]
    except ValueError:
        try:
            infos = await asyncio.get_running_loop().getaddrinfo(host, parsed.port or None, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            return f"Could not resolve host {host}: {e}"
        addresses = [info[4][0] for info in infos]

    if not addresses or not all(is_public_address(a) for a in addresses):
        return f"Host resolves to a non-public address: {host}"
    return None


async def _get_following_redirects(
    client: httpx.AsyncClient, url: str, user_agent: str
) -> Optional[httpx.Response]:
    for _ in range(MAX_REDIRECTS + 1):
        problem = await validate_url(url)
        if problem:
            logger.warning(f"SSRF check failed for {url}: {problem}")
            return None

        response = await client.get(url, headers={"User-Agent": user_agent}, follow_redirects=False)
        if not response.is_redirect:
            return response
        url = str(response.url.join(response.headers["location"]))

    logger.warning(f"Too many redirects fetching {url}")
    return None


async def fetch_url_content(
    url: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    user_agent: str = DEFAULT_USER_AGENT,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[str]:
    """
    Fetch the text content of a URL.

    Args:
        url: The URL to fetch
        max_length: Truncate the returned text to this many characters
        user_agent: User-Agent header to send
        client: Reuse an existing client (optional)

    Returns:
        The (truncated) text, or None when the URL or a redirect target is
        refused, the request fails, or the response is not text.
    """
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as own_client:
                response = await _get_following_redirects(own_client, url, user_agent)
        else:
            response = await _get_following_redirects(client, url, user_agent)
    except httpx.HTTPError as e:
        logger.warning(f"Error fetching URL {url}: {e}")
        return None

    if response is None:
        return None
    if not response.is_success:
        logger.warning(f"Failed to fetch URL {url}: HTTP {response.status_code}")
        return None

    content_type = response.headers.get("content-type", "")
    if "text" not in content_type:
        logger.warning(f"Skipping non-text content from {url}: {content_type}")
        return None

    return response.text[:max_length]
