"""Confine untrusted relative paths to a trusted root directory.

``resolve`` is the only function the labs use to turn client input into a
filesystem path. It never touches the filesystem, so it is safe to call from
any number of threads or tasks at once.

``join_unsafe`` is kept as a negative example for the canonicalization lab.
It must not be used outside the insecure demo route.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from secure_labs.errors import LabError, TraversalDetected, ValidationFailed
from secure_labs.types import RejectionReason

# A "%" that does not start a two-digit hex escape
_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


@dataclass(frozen=True)
class Resolved:
    path: Path


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str

    def to_error(self) -> LabError:
        """Convert the rejection into the error raised by request handlers."""
        if self.reason is RejectionReason.TRAVERSAL_DETECTED:
            # The attempted path is never echoed back to the client
            return TraversalDetected()
        return ValidationFailed(self.message)


def canonical_root(root: str | os.PathLike[str]) -> str:
    """Return the absolute, normalized form of a trusted root directory."""
    return os.path.abspath(os.fspath(root))


def decode_input(raw: str) -> str | None:
    """Percent-decode ``raw`` once, or return None if it cannot be decoded.

    Malformed escapes and escapes that do not form valid UTF-8 are decode
    failures. The raw string is never used as a fallback.
    """
    if _MALFORMED_ESCAPE.search(raw):
        return None
    try:
        return unquote(raw, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return None


def is_within_root(root: str, candidate: str) -> bool:
    """Check that ``candidate`` is ``root`` or lies beneath it.

    Both arguments must already be canonical. The separator-qualified prefix
    keeps siblings such as ``/files-other`` out of a ``/files`` root.
    """
    if candidate == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return candidate.startswith(prefix)


def resolve(root: str | os.PathLike[str], raw: str) -> Resolved | Rejected:
    """Resolve untrusted ``raw`` against ``root``.

    Returns ``Resolved`` with a canonical absolute path inside the root, or
    ``Rejected`` tagged ``invalid-input`` (undecodable input, NUL bytes,
    characters the filesystem cannot encode) or ``traversal-detected`` (the canonical path leaves the root). An empty
    string resolves to the root itself.
    """
    if not isinstance(raw, str):
        return Rejected(RejectionReason.INVALID_INPUT, "filename must be a string")

    decoded = decode_input(raw)
    if decoded is None:
        return Rejected(RejectionReason.INVALID_INPUT, "filename contains a malformed percent-escape")

    if "\0" in decoded:
        return Rejected(RejectionReason.INVALID_INPUT, "null byte not allowed")

    try:
        # Lone surrogates cannot be turned into a filesystem path
        os.fsencode(decoded)
    except UnicodeEncodeError:
        return Rejected(RejectionReason.INVALID_INPUT, "filename is not a valid path")

    base = canonical_root(root)
    # Lexical only: os.path.join drops the root for absolute input, which the
    # boundary check then rejects
    candidate = os.path.normpath(os.path.join(base, decoded))

    if not is_within_root(base, candidate):
        return Rejected(RejectionReason.TRAVERSAL_DETECTED, "Path traversal detected")

    return Resolved(Path(candidate))


def join_unsafe(root: str | os.PathLike[str], raw: str) -> Path:
    """UNSAFE: concatenate root and raw input without any checks.

    No decoding, no canonicalization and no boundary check. Exists only so the
    insecure demo route can show what the safe resolver prevents.
    """
    return Path(os.path.join(os.fspath(root), raw))
