import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from secure_labs.errors import TraversalDetected, ValidationFailed
from secure_labs.resolver import (
    Rejected,
    Resolved,
    canonical_root,
    decode_input,
    is_within_root,
    join_unsafe,
    resolve,
)
from secure_labs.types import RejectionReason


@pytest.fixture
def root(tmp_path: Path) -> Path:
    path = tmp_path / "files"
    path.mkdir()
    return path


def assert_inside(root: Path, result):
    assert isinstance(result, Resolved)
    resolved = str(result.path)
    base = str(root)
    assert resolved == base or resolved.startswith(base + os.sep)


def test_resolve_plain_filename(root):
    """Test that a simple filename resolves directly under the root."""
    result = resolve(root, "hello.txt")

    assert result == Resolved(root / "hello.txt")


def test_resolve_empty_string_returns_root(root):
    """Test that an empty input resolves to the root itself."""
    result = resolve(root, "")

    assert result == Resolved(root)


def test_resolve_collapses_dot_segments_and_separators(root):
    """Test that '.', '..' and repeated separators are collapsed inside the root."""
    result = resolve(root, "notes/./drafts/..//readme.md")

    assert result == Resolved(root / "notes" / "readme.md")


def test_resolve_strips_trailing_separator(root):
    """Test that a trailing separator resolves to the directory path."""
    result = resolve(root, "notes/")

    assert result == Resolved(root / "notes")


def test_resolve_result_is_absolute(root, monkeypatch):
    """Test that a relative root still yields an absolute path."""
    monkeypatch.chdir(root.parent)

    result = resolve("files", "hello.txt")

    assert isinstance(result, Resolved)
    assert result.path.is_absolute()
    assert result.path == root / "hello.txt"


@pytest.mark.parametrize(
    "raw",
    [
        "../secret.txt",
        "../../../../etc/passwd",
        "notes/../../secret.txt",
        "a/b/../../../x",
        "..",
    ],
)
def test_resolve_rejects_parent_traversal(root, raw):
    """Test that inputs escaping the root via '..' are rejected as traversal."""
    result = resolve(root, raw)

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.TRAVERSAL_DETECTED


@pytest.mark.parametrize("raw", ["/etc/passwd", "//etc/passwd", "/"])
def test_resolve_rejects_absolute_input(root, raw):
    """Test that absolute input cannot replace the root."""
    result = resolve(root, raw)

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.TRAVERSAL_DETECTED


def test_resolve_rejects_percent_encoded_traversal(root):
    """Test that '%2e%2e%2fsecret' decodes to '../secret' and is rejected."""
    assert decode_input("%2e%2e%2fsecret") == "../secret"

    result = resolve(root, "%2e%2e%2fsecret")

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.TRAVERSAL_DETECTED


def test_resolve_rejects_encoded_separators_mid_path(root):
    """Test that encoded separators hidden after a real name are still caught."""
    result = resolve(root, "hello.txt%2F..%2F..%2Fetc%2Fpasswd")

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.TRAVERSAL_DETECTED


def test_resolve_decodes_double_encoding_only_once(root):
    """Test that double-encoded traversal becomes a literal name inside the root."""
    result = resolve(root, "%252e%252e%252fsecret")

    assert result == Resolved(root / "%2e%2e%2fsecret")


def test_resolve_rejects_sibling_with_root_prefix(root):
    """Test that a sibling directory sharing the root's name prefix is rejected."""
    sibling = root.parent / (root.name + "-other")
    sibling.mkdir()

    for raw in [f"../{root.name}-other/x", f"../{root.name}_secret", f"../{root.name}2/x"]:
        result = resolve(root, raw)
        assert isinstance(result, Rejected), raw
        assert result.reason is RejectionReason.TRAVERSAL_DETECTED


def test_is_within_root_requires_separator_after_prefix():
    """Test the boundary check against the naive string-prefix bug."""
    assert is_within_root("/files", "/files")
    assert is_within_root("/files", "/files/x")
    assert not is_within_root("/files", "/files-other/x")
    assert not is_within_root("/files", "/files_secret")
    assert not is_within_root("/files", "/files2")


def test_is_within_root_handles_filesystem_root():
    """Test that a root of '/' admits every absolute path."""
    assert is_within_root("/", "/etc/passwd")


@pytest.mark.parametrize("raw", ["%zz", "100%", "%2", "abc%g0"])
def test_resolve_rejects_malformed_escapes(root, raw):
    """Test that malformed percent-escapes are rejected rather than passed through."""
    result = resolve(root, raw)

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.INVALID_INPUT


def test_resolve_rejects_escapes_that_are_not_utf8(root):
    """Test that escapes forming invalid UTF-8 are a decode failure."""
    result = resolve(root, "%e9t%e9.txt")

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.INVALID_INPUT


def test_resolve_accepts_encoded_utf8(root):
    """Test that valid encoded UTF-8 decodes to the expected name."""
    result = resolve(root, "%C3%A9t%C3%A9.txt")

    assert result == Resolved(root / "été.txt")


@pytest.mark.parametrize("raw", ["hello.txt\0.png", "%00", "hello%00.txt"])
def test_resolve_rejects_nul_bytes(root, raw):
    """Test that raw and encoded NUL bytes are rejected as invalid input."""
    result = resolve(root, raw)

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.INVALID_INPUT


def test_resolve_rejects_non_string_input(root):
    """Test that non-string input is rejected as invalid input."""
    result = resolve(root, 42)

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.INVALID_INPUT


def test_resolve_rejects_lone_surrogates(root):
    """Test that characters the filesystem cannot encode are rejected as invalid input."""
    result = resolve(root, "\ud800.txt")

    assert isinstance(result, Rejected)
    assert result.reason is RejectionReason.INVALID_INPUT


@pytest.mark.parametrize("depth", range(0, 8))
@pytest.mark.parametrize("ups", range(1, 10))
def test_resolve_never_escapes_root(root, depth, ups):
    """Test that any mix of descending and '../' segments stays inside or is rejected."""
    raw = "a/" * depth + "../" * ups + "target.txt"

    result = resolve(root, raw)

    if isinstance(result, Rejected):
        assert result.reason is RejectionReason.TRAVERSAL_DETECTED
        assert ups > depth
    else:
        assert_inside(root, result)


def test_resolve_is_consistent_under_concurrency(root):
    """Test that concurrent calls produce the same results as sequential calls."""
    inputs = []
    for i in range(40):
        inputs.append(f"file-{i}.txt")
        inputs.append("../" * (i % 5 + 1) + f"escape-{i}")
        inputs.append(f"dir-{i}/%2e%2e/file-{i}")
        inputs.append(f"bad-{i}%zz")

    sequential = [resolve(root, raw) for raw in inputs]
    with ThreadPoolExecutor(max_workers=32) as pool:
        concurrent = list(pool.map(lambda raw: resolve(root, raw), inputs))

    assert len(inputs) >= 100
    assert concurrent == sequential


def test_rejection_maps_to_error_without_echoing_input(root):
    """Test that a traversal rejection becomes a generic TraversalDetected error."""
    rejection = resolve(root, "../very-secret-name")

    error = rejection.to_error()

    assert isinstance(error, TraversalDetected)
    assert "very-secret-name" not in error.message


def test_invalid_input_rejection_keeps_descriptive_message(root):
    """Test that an invalid-input rejection carries its message into the error."""
    error = resolve(root, "%00").to_error()

    assert isinstance(error, ValidationFailed)
    assert error.message == "null byte not allowed"


def test_canonical_root_normalizes(tmp_path):
    """Test that the root is made absolute and normalized."""
    assert canonical_root(f"{tmp_path}/files/../files/") == str(tmp_path / "files")


def test_join_unsafe_does_no_checks(root):
    """Test that the unsafe join happily leaves the root."""
    joined = join_unsafe(root, "../secret.txt")

    assert joined == root / ".." / "secret.txt"
    assert joined.resolve() == root.parent / "secret.txt"
