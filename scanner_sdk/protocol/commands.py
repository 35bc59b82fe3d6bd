"""Command vocabulary shared by both transports.

Normalization, the line terminator, and the lookup tables that tell a framer
what shape of reply to expect for a given command.
"""
from __future__ import annotations

from typing import Optional

COMMAND_TERMINATOR = "\r"
COMMAND_ENCODING = "ascii"

# Commands whose replies carry an XML status/list document.
XML_COMMANDS = frozenset({"GSI", "PSI", "MSI", "GLT"})

# Commands whose UDP replies span several datagrams with Footer sequencing.
# GSI/PSI/MSI fit in a single datagram.
MULTI_FRAGMENT_COMMANDS = frozenset({"GLT"})

# Closing tag that ends the XML document returned by each XML command.
STATUS_CLOSING_TAG = "</ScannerInfo>"
CLOSING_TAGS = {
    "GSI": STATUS_CLOSING_TAG,
    "PSI": STATUS_CLOSING_TAG,
    "MSI": "</MSI>",
    "GLT": "</GLT>",
}

# The device streams XML line by line over serial; never wait less than this.
SERIAL_XML_TIMEOUT_FLOOR = 3.0  # seconds
MULTI_FRAGMENT_TIMEOUT_FLOOR = 10.0  # seconds


def normalize_command(command: str) -> str:
    """Trim and uppercase outbound command text.

    Examples:
        >>> normalize_command("  gsi,0 ")
        'GSI,0'
    """
    return command.strip().upper()


def encode_command(normalized: str) -> bytes:
    """Wire bytes for an already-normalized command."""
    return (normalized + COMMAND_TERMINATOR).encode(COMMAND_ENCODING, errors="replace")


def base_command(command: str) -> str:
    """Return the command token before the first comma ("GSI" for "GSI,0")."""
    return command.split(",", 1)[0].strip().upper()


def is_xml_command(command: str) -> bool:
    """Check if the reply to a command is an XML document."""
    return base_command(command) in XML_COMMANDS


def is_multi_fragment_command(command: str) -> bool:
    """Check if the UDP reply to a command is split into Footer-sequenced fragments."""
    return base_command(command) in MULTI_FRAGMENT_COMMANDS


def closing_tag_for(command: str) -> Optional[str]:
    """Closing tag that completes the XML reply, or None for plain commands."""
    return CLOSING_TAGS.get(base_command(command))
