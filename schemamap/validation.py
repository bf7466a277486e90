"""Validation of operator-supplied values (hosts, ports, names, AWS settings)."""

import re

_HOST_RE = re.compile(r"^[a-zA-Z0-9._-]+$")
_DATABASE_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$")
_MAPPING_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_AWS_REGION_RE = re.compile(r"^[a-z]{2}(-gov|-iso[a-z]?)?-[a-z]+-\d$")
_ACCESS_KEY_ID_RE = re.compile(r"^[A-Z0-9]{16,128}$")


def is_valid_port(port: int) -> bool:
    return isinstance(port, int) and not isinstance(port, bool) and 1 <= port <= 65535


def is_valid_host(host: str) -> bool:
    """Hostnames, IPv4 addresses and localhost."""
    if not host or not host.strip():
        return False
    return bool(_HOST_RE.match(host))


def is_valid_database_name(name: str) -> bool:
    if not name or not name.strip():
        return False
    return bool(_DATABASE_RE.match(name))


def is_valid_mapping_name(name: str) -> bool:
    """Mapping and connection names become file names: letters, digits, '-' and '_' only."""
    if not name or not name.strip():
        return False
    return bool(_MAPPING_NAME_RE.match(name))


def is_non_empty(value: str) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_valid_aws_region(region: str) -> bool:
    """AWS region codes such as ``us-east-1`` or ``us-gov-west-1``."""
    return bool(region) and bool(_AWS_REGION_RE.match(region))


def is_valid_access_key_id(access_key_id: str) -> bool:
    return bool(access_key_id) and bool(_ACCESS_KEY_ID_RE.match(access_key_id))
