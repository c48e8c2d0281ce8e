"""
SSRF Protection - Refuse to fetch pages or manifests on internal hosts.
"""
import ipaddress
import socket
from typing import Iterable, Set
from urllib.parse import urlparse

from app.logger import logger


class SSRFProtection:
    """Validates outbound URLs before the page or its manifest is fetched."""

    BLOCKED_RANGES = [
        ipaddress.ip_network("10.0.0.0/8"),
        ipaddress.ip_network("172.16.0.0/12"),
        ipaddress.ip_network("192.168.0.0/16"),
        ipaddress.ip_network("127.0.0.0/8"),
        ipaddress.ip_network("169.254.0.0/16"),
        ipaddress.ip_network("0.0.0.0/8"),
        ipaddress.ip_network("::1/128"),
        ipaddress.ip_network("fc00::/7"),
        ipaddress.ip_network("fe80::/10"),
    ]

    BLOCKED_HOSTS = {
        "localhost",
        "metadata.google.internal",
    }

    @classmethod
    def _resolve(cls, hostname: str) -> Set[str]:
        """All addresses a hostname resolves to (empty when DNS fails)."""
        try:
            infos = socket.getaddrinfo(hostname, None)
        except socket.gaierror:
            logger.warning(f"DNS resolution failed for {hostname}")
            return set()
        return {info[4][0] for info in infos}

    @classmethod
    def _blocked_address(cls, addresses: Iterable[str]) -> str:
        for address in addresses:
            try:
                ip = ipaddress.ip_address(address.split("%", 1)[0])
            except ValueError:
                continue
            for blocked_range in cls.BLOCKED_RANGES:
                if ip in blocked_range:
                    return f"IP {address} is in blocked range {blocked_range}"
        return ""

    @classmethod
    def validate_url(cls, url: str) -> tuple[bool, str]:
        """
        Validate URL for SSRF vulnerabilities.

        Returns:
            tuple: (is_valid, error_message)
        """
        parsed = urlparse(url)

        if parsed.scheme not in ("http", "https"):
            return False, f"Invalid scheme: {parsed.scheme}"

        hostname = parsed.hostname
        if not hostname:
            return False, "Empty hostname"

        if hostname.lower() in cls.BLOCKED_HOSTS:
            return False, f"Blocked hostname: {hostname}"

        # Literal IPs skip DNS
        try:
            ipaddress.ip_address(hostname)
            addresses = {hostname}
        except ValueError:
            # Unresolvable hosts pass; the request itself will fail
            addresses = cls._resolve(hostname)

        reason = cls._blocked_address(addresses)
        if reason:
            return False, reason

        return True, ""
