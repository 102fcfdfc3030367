import logging
import os
from pathlib import Path

from secure_labs.errors import InternalError, IsDirectory, NotFound
from secure_labs.resolver import Rejected, canonical_root, join_unsafe, resolve

logger = logging.getLogger(__name__)

SAMPLE_FILES: dict[str, str] = {
    "hello.txt": "Hello from safe file!\n",
    "notes/readme.md": "# Readme\nSample readme file",
}


class FileOperations:
    """Handle all file I/O for the canonicalization lab."""

    def __init__(self, base_dir: str | os.PathLike[str]):
        self.base_dir = Path(canonical_root(base_dir))

    def ensure_base_dir(self) -> None:
        """Ensure the base directory exists."""
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def read_text(self, path: Path) -> str:
        """Read a resolved path with a single open-and-read attempt."""
        try:
            # newline="" keeps line endings exactly as stored
            with open(path, encoding="utf-8", errors="replace", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFound() from None
        except IsADirectoryError:
            raise IsDirectory() from None
        except NotADirectoryError:
            # A parent component is a regular file, so the target cannot exist
            raise NotFound() from None
        except PermissionError as e:
            # Windows reports directories as access denied
            if path.is_dir():
                raise IsDirectory() from None
            logger.error(f"Permission denied reading {path}")
            raise InternalError() from e
        except OSError as e:
            logger.exception(f"Unexpected error reading {path}")
            raise InternalError() from e

    def write_text(self, path: Path, content: str) -> None:
        """Write a resolved path, creating parent directories as needed."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            logger.exception(f"Failed to write {path}")
            raise InternalError("Setup failed") from e

    def write_samples(self, samples: dict[str, str] | None = None) -> list[Path]:
        """Write sample files through the safe resolver.

        Keys that the resolver rejects are skipped, so samples can never be
        written outside the base directory.
        """
        if samples is None:
            samples = SAMPLE_FILES

        written = []
        for name, content in samples.items():
            result = resolve(self.base_dir, name)
            if isinstance(result, Rejected):
                logger.warning(f"Skipping sample with rejected name ({result.reason.value})")
                continue
            self.write_text(result.path, content)
            written.append(result.path)

        logger.info(f"Wrote {len(written)} sample file(s) to {self.base_dir}")
        return written

    def read_unsafe(self, raw: str) -> tuple[Path, str]:
        """UNSAFE: read ``raw`` joined to the base directory with no checks.

        Check-then-read with naive concatenation. Kept only for the insecure
        demo route so students can compare it with ``read_text``.
        """
        joined = join_unsafe(self.base_dir, raw)

        if not joined.exists():
            raise NotFound(f"File not found: {joined}")

        try:
            with open(joined, encoding="utf-8", errors="replace") as f:
                return joined, f.read()
        except OSError as e:
            raise InternalError("Read error") from e
