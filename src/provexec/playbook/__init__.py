"""
Playbook runner integration.
"""

from .ansible import PlaybookOptions, PlaybookRunner, parse_ansible_log, write_ansible_yaml

__all__ = [
    "PlaybookOptions",
    "PlaybookRunner",
    "parse_ansible_log",
    "write_ansible_yaml",
]
