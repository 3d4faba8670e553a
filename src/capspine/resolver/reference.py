"""
Capability reference parsing and revision-name conversion.

Users refer to a capability as ``worker`` (always the live definition) or
pin a revision as ``worker@v1.3.1``. Stored revisions are named
``<base>-v<version>``, so a pinned reference converts to a storage key by
replacing ``@v`` with ``-v``. The converted name is both the exact key of
one revision and the prefix of every revision extending a partial pin
(``worker@v1`` → ``worker-v1`` → ``worker-v1.0.0``, ``worker-v1.4.2``, ...).

Architecture:
    ::

        "worker"          → CapabilityReference("worker", None)
                          → convert_to_revision_name → "worker"
        "worker@v1.3.1"   → CapabilityReference("worker", "v1.3.1")
                          → convert_to_revision_name → "worker-v1.3.1"
        "@v1.0"           → no separator (empty base) → validated as a plain name

Examples:
    >>> convert_to_revision_name("worker@v1.3.1")
    'worker-v1.3.1'
    >>> convert_to_revision_name("worker")
    'worker'
    >>> split_revision_name("my-worker-v1.3.1")
    ('my-worker', '1.3.1')

Tags:
    parsing, naming, validation, revisions, capspine
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from capspine.core.errors import InvalidNameError
from capspine.resolver.versions import is_semver

REVISION_SEPARATOR = "@v"

QUALIFIED_NAME_MAX_LENGTH = 63
DNS1123_SUBDOMAIN_MAX_LENGTH = 253

_QUALIFIED_NAME_FMT = "([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]"
_QUALIFIED_NAME_RE = re.compile(f"^{_QUALIFIED_NAME_FMT}$")
_QUALIFIED_NAME_ERR = (
    "must consist of alphanumeric characters, '-', '_' or '.', "
    "and must start and end with an alphanumeric character"
)

_DNS1123_LABEL_FMT = "[a-z0-9]([-a-z0-9]*[a-z0-9])?"
_DNS1123_SUBDOMAIN_FMT = f"{_DNS1123_LABEL_FMT}(\\.{_DNS1123_LABEL_FMT})*"
_DNS1123_SUBDOMAIN_RE = re.compile(f"^{_DNS1123_SUBDOMAIN_FMT}$")
_DNS1123_SUBDOMAIN_ERR = (
    "a lowercase RFC 1123 subdomain must consist of lower case alphanumeric characters, "
    "'-' or '.', and must start and end with an alphanumeric character"
)


def _regex_error(msg: str, fmt: str, *examples: str) -> str:
    if not examples:
        return f"{msg} (regex used for validation is '{fmt}')"
    shown = " or ".join(f"'{e}', " for e in examples)
    return f"{msg} (e.g. {shown}regex used for validation is '{fmt}')"


def _dns1123_subdomain_errors(value: str) -> list[str]:
    errs = []
    if len(value) > DNS1123_SUBDOMAIN_MAX_LENGTH:
        errs.append(f"must be no more than {DNS1123_SUBDOMAIN_MAX_LENGTH} characters")
    if not _DNS1123_SUBDOMAIN_RE.match(value):
        errs.append(_regex_error(_DNS1123_SUBDOMAIN_ERR, _DNS1123_SUBDOMAIN_FMT, "example.com"))
    return errs


def qualified_name_errors(value: str) -> list[str]:
    """Validate a resource name; returns the list of violations (empty when valid).

    Accepts ``name`` or ``prefix/name`` where the prefix is a DNS subdomain
    and the name is at most 63 alphanumerics, ``-``, ``_`` or ``.``.
    """
    errs: list[str] = []
    parts = value.split("/")
    if len(parts) == 1:
        name = parts[0]
    elif len(parts) == 2:
        prefix, name = parts
        if not prefix:
            errs.append("prefix part must be non-empty")
        else:
            errs.extend(f"prefix part {msg}" for msg in _dns1123_subdomain_errors(prefix))
    else:
        return [
            "a qualified name "
            + _regex_error(_QUALIFIED_NAME_ERR, _QUALIFIED_NAME_FMT, "MyName", "my.name", "123-abc")
            + " with an optional DNS subdomain prefix and '/' (e.g. 'example.com/MyName')"
        ]

    if not name:
        errs.append("name part must be non-empty")
    elif len(name) > QUALIFIED_NAME_MAX_LENGTH:
        errs.append(f"name part must be no more than {QUALIFIED_NAME_MAX_LENGTH} characters")
    if not _QUALIFIED_NAME_RE.match(name):
        errs.append(
            "name part "
            + _regex_error(_QUALIFIED_NAME_ERR, _QUALIFIED_NAME_FMT, "MyName", "my.name", "123-abc")
        )
    return errs


@dataclass(frozen=True)
class CapabilityReference:
    """A user-supplied capability name with an optional version pin."""

    base_name: str
    version_token: str | None = None

    @classmethod
    def parse(cls, raw: str) -> CapabilityReference:
        """Split ``raw`` at the first ``@``; no ``@`` means no version token."""
        base, sep, token = raw.partition("@")
        if not sep:
            return cls(base_name=raw)
        return cls(base_name=base, version_token=token)

    @property
    def is_pinned(self) -> bool:
        return self.version_token is not None

    def __str__(self) -> str:
        if self.version_token is None:
            return self.base_name
        return f"{self.base_name}@{self.version_token}"


def convert_to_revision_name(reference: str) -> str:
    """Convert a reference to the name of the revision it pins.

    ``worker@v1.3.1`` becomes ``worker-v1.3.1``. A reference without ``@v``
    (or with nothing before it) is returned unchanged once it validates as
    a resource name.

    Raises:
        InvalidNameError: If the direct name or the constructed revision
            name is not a valid resource name.
    """
    base, sep, _ = reference.partition(REVISION_SEPARATOR)
    if not sep or not base:
        errs = qualified_name_errors(reference)
        if errs:
            raise InvalidNameError(reference, errs)
        return reference

    version = reference[len(base) + len(REVISION_SEPARATOR):]
    revision_name = f"{base}-v{version}"
    errs = qualified_name_errors(revision_name)
    if errs:
        raise InvalidNameError(base, errs).with_context(revision=revision_name)
    return revision_name


def split_revision_name(revision_name: str) -> tuple[str, str]:
    """Reverse of :func:`convert_to_revision_name` for semver revisions.

    Splits at the right-most ``-v`` whose remainder is a semantic version, so
    base names containing ``-`` and pre-release versions both survive.

    Raises:
        InvalidNameError: If no ``-v<semver>`` suffix is present.
    """
    idx = revision_name.rfind("-v")
    while idx > 0:
        version = revision_name[idx + 2:]
        if version and is_semver(version):
            return revision_name[:idx], version
        idx = revision_name.rfind("-v", 0, idx)
    raise InvalidNameError(
        revision_name, message=f"revision name {revision_name!r} has no -v<semver> suffix"
    )


def extract_component_name(revision_name: str) -> str:
    """Everything before the last ``-`` (``web-v3`` → ``web``)."""
    return revision_name.rpartition("-")[0]


def extract_revision_num(revision_name: str, delimiter: str = "-") -> int:
    """Revision number after the last ``delimiter`` (``web-v3`` → 3).

    Raises:
        InvalidNameError: If there is no delimiter, the last part does not
            start with ``v``, or the rest is not an integer.
    """
    parts = revision_name.split(delimiter)
    if len(parts) == 1 or not parts[-1].startswith("v"):
        raise InvalidNameError(revision_name, message="bad revision name")
    number = parts[-1][1:]
    if not number.isdigit():
        raise InvalidNameError(revision_name, message=f"bad revision name: {number!r} is not a number")
    return int(number)


__all__ = [
    "REVISION_SEPARATOR",
    "CapabilityReference",
    "qualified_name_errors",
    "convert_to_revision_name",
    "split_revision_name",
    "extract_component_name",
    "extract_revision_num",
]
