"""Semantic version parsing for revision name suffixes.

Revision suffixes are written the way users pin them: a leading ``v`` and
optionally only ``major`` or ``major.minor`` (``v1``, ``v1.2``, ``v1.2.3-rc.1``).
Missing components are read as zero.
"""

from __future__ import annotations

import semver


def parse_semver(token: str) -> semver.Version:
    """Parse ``token`` as a semantic version, tolerating ``v`` and missing minor/patch.

    Raises:
        ValueError: If ``token`` is not a semantic version.
    """
    text = token[1:] if token[:1] in ("v", "V") else token
    return semver.Version.parse(text, optional_minor_and_patch=True)


def is_semver(token: str) -> bool:
    try:
        parse_semver(token)
    except (ValueError, TypeError):
        return False
    return True


__all__ = ["parse_semver", "is_semver"]
