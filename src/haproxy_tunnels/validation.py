# src/haproxy_tunnels/validation.py
"""
Input validation for tunnel fields.

All validators take the raw strings an operator typed (comma-separated
lists for addresses and ports) and return a bool. None of them resolve
names or touch the network.
"""

from __future__ import annotations

import ipaddress
import re

IPV4_PATTERN = re.compile(r"[0-9]{1,3}(\.[0-9]{1,3}){3}")
DIGITS_PATTERN = re.compile(r"[0-9]+")
TELEGRAM_ID_PATTERN = re.compile(r"-?[0-9]+")
TELEGRAM_TOKEN_PATTERN = re.compile(r"[0-9]+:[A-Za-z0-9_-]+")

MODES = ("tcp", "http")
HEALTH_CHECK_DISABLED = "none"

MIN_PORT = 1
MAX_PORT = 65535


def split_csv(value: str) -> list[str]:
    """Split a comma-separated value, stripping whitespace from each token."""
    return [token.strip() for token in value.split(",")]


def strip_brackets(address: str) -> str:
    """Remove one pair of surrounding brackets ([::1] -> ::1)."""
    if address.startswith("[") and address.endswith("]"):
        return address[1:-1]
    return address


def is_ipv4(address: str) -> bool:
    """Dotted-quad check, each octet 0-255."""
    if not IPV4_PATTERN.fullmatch(address):
        return False
    return all(int(octet) <= 255 for octet in address.split("."))


def is_ipv6(address: str) -> bool:
    """IPv6 literal check (full, compressed or with embedded IPv4).

    Zone identifiers like fe80::1%eth0 are rejected; HAProxy server lines
    don't take them.
    """
    if "%" in address:
        return False
    try:
        ipaddress.IPv6Address(address)
    except ValueError:
        return False
    return True


def is_valid_address(address: str) -> bool:
    address = strip_brackets(address)
    return is_ipv4(address) or is_ipv6(address)


def is_valid_port(value: str) -> bool:
    value = value.strip()
    if not DIGITS_PATTERN.fullmatch(value):
        return False
    return MIN_PORT <= int(value) <= MAX_PORT


def validate_addresses(csv: str) -> bool:
    """Every comma-separated token must be an IPv4 or IPv6 literal.

    Mixed address families are allowed.
    """
    if not csv or not csv.strip():
        return False
    return all(is_valid_address(token) for token in split_csv(csv))


def validate_ports(csv: str) -> bool:
    """Every comma-separated token must be an integer in [1, 65535].

    Leading zeros and duplicates are accepted.
    """
    if not csv:
        return False
    return all(is_valid_port(token) for token in split_csv(csv))


def validate_mode(value: str) -> bool:
    return value.strip().lower() in MODES


def validate_health_check_port(value: str) -> bool:
    """Accept the literal 'none' (disable) or a single port."""
    if value == HEALTH_CHECK_DISABLED:
        return True
    return "," not in value and validate_ports(value)


def validate_telegram_admin_id(value: str) -> bool:
    """Empty (no admin restriction) or a numeric Telegram user/chat id."""
    return not value or bool(TELEGRAM_ID_PATTERN.fullmatch(value))


def validate_telegram_token(value: str) -> bool:
    """Empty (not configured) or a BotFather token: <bot id>:<secret>."""
    return not value or bool(TELEGRAM_TOKEN_PATTERN.fullmatch(value))
