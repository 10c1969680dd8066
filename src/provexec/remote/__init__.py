"""
Remote management CLI integration.
"""

from .esxcli import PASSWORD_MASK, RemoteCliBridge, extract_thumbprint

__all__ = [
    "PASSWORD_MASK",
    "RemoteCliBridge",
    "extract_thumbprint",
]
