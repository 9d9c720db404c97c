"""
adapters/file_token_cache.py
──────────────────────────────────────────────────────────────────────────────
Implements TokenCachePort as one append-only text file per profile.

File layout:
  <CODEARTIFACT_CACHE_DIR>/<profile>/ssoToken.records

  Each record is one line:   <YYYYMMDD-HHMMSS> <token>
  A blank last line means the cache was invalidated after an SSO re-login.
  Only the LAST line is authoritative; earlier lines are history.

Writes:
  - Every write is a single write() on a file opened in append mode, under
    an exclusive flock on a sibling ".lock" file (POSIX).  Concurrent builds
    serialise on the lock; readers never take it.
  - After an append, files longer than CODEARTIFACT_CACHE_MAX_RECORDS lines
    are trimmed to their tail via a temp file + os.replace, so a reader sees
    either the old file or the new one, never a half-written one.

Reads and writes never raise on I/O trouble.  An unparseable file is a
logged miss; a failed write is logged and dropped.  A file that is not valid
UTF-8 is reset to the newest record on the next append.

Profile names become directory names, so names containing path separators
or equal to "." / ".." are rejected with ConfigurationError.
"""
from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator

from codeartifact_sso.config.settings import Settings
from codeartifact_sso.domain.exceptions import CacheParseError, ConfigurationError
from codeartifact_sso.domain.models import CacheRecord, CacheState

if os.name == "posix":
    import fcntl
else:
    fcntl = None

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "ssoToken.records"
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


def parse_record(line: str) -> CacheRecord:
    """Decode one cache line into a CacheRecord.

    Raises:
        CacheParseError: If the line is neither blank nor "<timestamp> <token>".
    """
    stripped = line.strip()
    if not stripped:
        return CacheRecord.invalidated()

    fields = stripped.split(" ", 1)
    if len(fields) < 2 or not fields[1].strip():
        raise CacheParseError(f"expected '<timestamp> <token>', got {len(fields)} field(s)")

    try:
        timestamp = datetime.strptime(fields[0], TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise CacheParseError(f"bad timestamp {fields[0]!r}") from exc

    return CacheRecord.valid(timestamp=timestamp, token=fields[1].strip())


class FileTokenCache:
    """File-backed implementation of TokenCachePort.

    Injected into CredentialProvider and LoginSessionChecker via
    services/container.py.
    """

    def __init__(self, settings: Settings) -> None:
        self._cache_dir = Path(settings.cache_dir)
        self._max_records = settings.cache_max_records
        logger.debug(
            "FileTokenCache ready | dir=%s max_records=%d",
            self._cache_dir,
            self._max_records,
        )

    def path_for(self, profile: str) -> Path:
        """Return the cache file for *profile*.

        Raises:
            ConfigurationError: If *profile* cannot be used as a directory name.
        """
        if profile in ("", ".", "..") or any(sep in profile for sep in ("/", "\\", os.sep)):
            raise ConfigurationError(f"Invalid AWS profile name for the token cache: {profile!r}")
        return self._cache_dir / profile / CACHE_FILE_NAME

    # ── TokenCachePort implementation ──────────────────────────────────────

    def load(self, profile: str) -> CacheRecord:
        """Return the authoritative record for *profile*.

        Raises:
            CacheParseError: If the file is unreadable or its last line is
                malformed.
        """
        path = self.path_for(profile)
        if not path.exists():
            logger.info("Token cache does not exist | profile=%s", profile)
            return CacheRecord.absent()

        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheParseError(f"cannot read {path}: {exc}") from exc

        if not lines:
            logger.info("Token cache is empty | profile=%s", profile)
            return CacheRecord.absent()

        return parse_record(lines[-1])

    def read(self, profile: str, expiry: timedelta, now: datetime) -> str | None:
        try:
            record = self.load(profile)
        except CacheParseError as exc:
            logger.warning("Ignoring unreadable token cache for profile '%s': %s", profile, exc)
            return None

        if record.state is CacheState.ABSENT:
            return None
        if record.state is CacheState.INVALIDATED:
            logger.info("Token cache was invalidated by a re-login | profile=%s", profile)
            return None

        if now > record.timestamp + expiry:
            logger.info(
                "Cached token expired | profile=%s timestamp=%s",
                profile,
                format_timestamp(record.timestamp),
            )
            return None

        return record.token

    def append(self, profile: str, timestamp: datetime, token: str) -> None:
        logger.info(
            "Caching token | profile=%s timestamp=%s", profile, format_timestamp(timestamp)
        )
        record = f"{format_timestamp(timestamp)} {token}"
        try:
            with self._locked(profile) as path:
                with path.open("a", encoding="utf-8") as fh:
                    fh.write(f"\n{record}")
                self._compact(path, record)
        except OSError as exc:
            logger.warning("Could not write token cache for profile '%s': %s", profile, exc)

    def invalidate(self, profile: str) -> None:
        logger.info("Invalidating token cache | profile=%s", profile)
        try:
            with self._locked(profile) as path:
                with path.open("a", encoding="utf-8") as fh:
                    fh.write("\n\n")
        except OSError as exc:
            logger.warning("Could not invalidate token cache for profile '%s': %s", profile, exc)

    # ── Private helpers ────────────────────────────────────────────────────

    @contextlib.contextmanager
    def _locked(self, profile: str) -> Iterator[Path]:
        path = self.path_for(profile)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created token cache directory %s", path.parent)

        lock_path = path.with_name(path.name + ".lock")
        with lock_path.open("a") as lock_fh:
            if fcntl is not None:
                fcntl.flock(lock_fh.fileno(), fcntl.LOCK_EX)
            try:
                yield path
            finally:
                if fcntl is not None:
                    fcntl.flock(lock_fh.fileno(), fcntl.LOCK_UN)

    def _compact(self, path: Path, record: str) -> None:
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            logger.warning("Token cache %s is not valid UTF-8, resetting it", path)
            self._replace(path, f"\n{record}")
            return

        if self._max_records <= 0:
            return

        # split("\n") rather than splitlines() so trailing blank lines survive
        parts = content.split("\n")
        if len(parts) <= self._max_records:
            return

        self._replace(path, "\n".join(parts[-self._max_records:]))
        logger.debug("Compacted %s from %d to %d lines", path, len(parts), self._max_records)

    def _replace(self, path: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_name, path)
        except Exception:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
