from __future__ import annotations

import re

from .errors import UnsafePackageNameError

PACKAGE_PATTERN = re.compile(r"package\s([a-zA-Z0-9.]+)", re.IGNORECASE)
SAFE_PACKAGE_PATTERN = re.compile(r"^[A-Za-z0-9_]+(\.[A-Za-z0-9_]+)*$")


def extract_package_name(policy_text: str) -> str:
    """Return the dotted name of the first `package` declaration, or "" if none."""
    match = PACKAGE_PATTERN.search(policy_text or "")
    if not match:
        return ""
    return match.group(1)


def ensure_safe_package_name(package_name: str) -> str:
    if not SAFE_PACKAGE_PATTERN.fullmatch(package_name):
        raise UnsafePackageNameError(f"package name is not a valid identifier: {package_name!r}")
    return package_name
