"""
Registry package names.

A registry name is 1-150 characters of lowercase ASCII letters, digits and
single hyphens, beginning and ending with a letter or digit. Names imported
from the legacy registry may carry an ecosystem prefix which is not part of
the registry name.
"""

import re
from typing import Iterable

from ..exit_codes import InvalidNameError

MAX_NAME_LENGTH = 150

_ALLOWED = re.compile(r"^[a-z0-9-]+$")


def strip_legacy_prefix(name: str, prefixes: Iterable[str]) -> str:
    """Remove the first matching legacy prefix from a package name."""
    for prefix in prefixes:
        if prefix and name.startswith(prefix):
            return name[len(prefix):]
    return name


def validate_package_name(name: str, legacy_prefixes: Iterable[str] = ()) -> str:
    """
    Check a name against the registry naming grammar.

    Returns:
        The name, unchanged

    Raises:
        InvalidNameError: With the first rule the name breaks
    """
    if not name:
        raise InvalidNameError(name, "package names cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(name, f"package names cannot exceed {MAX_NAME_LENGTH} characters")
    if not _ALLOWED.match(name):
        raise InvalidNameError(name, "package names can contain only lowercase letters, digits and hyphens")
    if name.startswith('-'):
        raise InvalidNameError(name, "package names must start with a lowercase letter or a digit")
    if name.endswith('-'):
        raise InvalidNameError(name, "package names cannot end with a hyphen")
    if '--' in name:
        raise InvalidNameError(name, "package names cannot contain consecutive hyphens")
    for prefix in legacy_prefixes:
        if prefix and name.startswith(prefix):
            raise InvalidNameError(name, f"package names cannot begin with '{prefix}'")
    return name


def normalize_package_name(name: str, legacy_prefixes: Iterable[str] = ()) -> str:
    """Strip any legacy prefix, then validate the result."""
    prefixes = list(legacy_prefixes)
    return validate_package_name(strip_legacy_prefix(name, prefixes), prefixes)
