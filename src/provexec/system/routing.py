"""
Local source address resolution via the OS routing table.

Uses `ip route get` to determine which local interface traffic to a remote
host would be routed through; the address of that interface is the one the
remote host can use to reach back to this host.
"""

import logging
import re
import socket
import time
from typing import Optional

from ..models.config import ExecConfig
from ..validation import RouteNotFoundError
from .commands import CommandRunner

logger = logging.getLogger(__name__)

_IPV4_PATTERN = re.compile(r"(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)(?:\.(?:25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)){3}")


def resolve_address(host: str) -> str:
    """
    Resolve a host name to a concrete IP address.

    Raises:
        RouteNotFoundError: If the name cannot be resolved
    """
    try:
        infos = socket.getaddrinfo(host, None)
    except socket.gaierror as e:
        raise RouteNotFoundError(f"Failed to resolve {host}: {e}") from e
    if not infos:
        raise RouteNotFoundError(f"Failed to resolve {host}: no addresses returned")
    return infos[0][4][0]


def extract_source_address(route_output: str) -> Optional[str]:
    """
    Return the token following "src" in `ip route get` output, if any.

    Example:
        >>> extract_source_address("10.0.0.9 via 10.0.0.1 dev eth0 src 10.0.0.5 uid 0")
        '10.0.0.5'
    """
    parts = route_output.split()
    if "src" not in parts:
        return None
    position = parts.index("src")
    if position + 1 >= len(parts):
        return None
    return parts[position + 1]


class RouteResolver:
    """
    Finds the local address the OS would use to reach a remote host.

    The routing table may briefly lack a usable route, for instance right
    after an interface is brought up, so the lookup is polled a bounded
    number of times before giving up.
    """

    def __init__(self, runner: Optional[CommandRunner] = None, config: Optional[ExecConfig] = None):
        self.config = config or (runner.config if runner else ExecConfig())
        self.runner = runner or CommandRunner(self.config)

    def resolve(self, remote_host: str) -> str:
        """
        Return the local host IP address that routes to remote_host.

        Raises:
            RouteNotFoundError: If no route with a source address is found
                within the configured number of attempts
        """
        address = resolve_address(remote_host)
        max_tries = self.config.route_max_tries
        tries = 0

        while tries < max_tries:
            result = self.runner.execute(self.config.ip_executable, ["route", "get", address])
            preferred = extract_source_address(result.stdout)
            if preferred:
                logger.debug(f"Preferred route to {remote_host} uses source address {preferred}")
                return preferred

            table = self.runner.execute(self.config.ip_executable, ["route"])
            logger.debug(f"failed to determine target route from routing table: \n{table.stdout}")
            time.sleep(self.config.route_poll_interval)
            tries += 1

        target = address if address == remote_host else f"{remote_host} ({address})"
        raise RouteNotFoundError(f"Failed to find preferred route to {target} after {tries} tries")

    def default_gateway(self) -> str:
        """
        Return the gateway address of the default route.

        Raises:
            RouteNotFoundError: If there is no default route
        """
        result = self.runner.execute(self.config.ip_executable, ["route", "show", "0/0"])
        parts = result.stdout.split()
        match = _IPV4_PATTERN.search(parts[2]) if len(parts) > 2 else None
        if not match:
            raise RouteNotFoundError(f"No default route found: {result.stdout.strip()!r}")
        return match.group(0)

    def default_routed_ip(self) -> str:
        """Return the address this host would use to reach the internet."""
        return self.resolve(self.default_gateway())
