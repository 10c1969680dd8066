"""
Host-level helpers: reachability probes, known-hosts cleanup and local
address discovery.
"""

import ipaddress
import logging
import socket
from pathlib import Path
from typing import Iterable, List, Optional, Union

import psutil

from .commands import CommandRunner

logger = logging.getLogger(__name__)


def is_reachable(address: str, runner: Optional[CommandRunner] = None) -> bool:
    """
    Check whether a host answers a single ICMP echo request within one second.
    """
    runner = runner or CommandRunner()
    result = runner.execute(runner.config.ping_executable, ["-c", "1", "-w", "1", address])
    return result.succeeded


def remove_host_entries(
    addresses: Iterable[str],
    known_hosts: Optional[Union[str, Path]] = None,
    runner: Optional[CommandRunner] = None,
) -> List[str]:
    """
    Remove host keys from an SSH known_hosts file.

    Stale keys for re-provisioned hosts make playbook runs fail host key
    verification, so they are removed before connecting again.

    Args:
        addresses: Host names or IPs whose keys should be removed
        known_hosts: known_hosts file to edit (ssh-keygen's default when None)
        runner: CommandRunner to use

    Returns:
        Addresses whose keys could not be removed
    """
    runner = runner or CommandRunner()
    failed = []
    for address in addresses:
        args = ["-R", address]
        if known_hosts is not None:
            args += ["-f", str(known_hosts)]
        result = runner.execute(runner.config.ssh_keygen_executable, args)
        if not result.succeeded:
            logger.warning(f"Failed to remove known host entry for {address}: {result.stderr.strip()}")
            failed.append(address)
    return failed


def first_host_ip() -> Optional[str]:
    """
    Return the first IPv4 address of this host that is neither loopback
    nor multicast, or None when the host has no such address.
    """
    for interface, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            ip = ipaddress.ip_address(addr.address)
            if ip.is_loopback or ip.is_multicast:
                continue
            logger.debug(f"Using address {addr.address} of interface {interface}")
            return addr.address
    return None
