"""Custom exceptions for svcs.

Validation and state errors are recoverable and surface as status text.
Storage failures abort the current operation.
"""


class SvcsError(RuntimeError):
    """Base class for all svcs errors."""
    pass


class ValidationError(SvcsError):
    """Bad or missing argument (path not found, empty message, bad hash)."""
    pass


class StateError(SvcsError):
    """Repository is not in a state that allows the operation."""
    pass


class NotInRepositoryError(StateError):
    """No .svcs directory found above the working directory."""

    def __init__(self, start: str):
        self.start = start
        super().__init__(f"Not inside an svcs repository (no .svcs found above {start})")


class IdentityMissingError(StateError):
    """No author configured."""

    def __init__(self):
        super().__init__("Please, tell me who you are. Run: svcs config <name>")


class CommitNotFoundError(StateError):
    """Hash does not match any logged commit."""

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Commit does not exist: {ref}")


# Storage Errors
class StorageFailure(SvcsError):
    """Low-level I/O failure on the commit/restore path."""
    pass


class NotFoundError(StorageFailure):
    """No stored entry for a digest/path pair."""

    def __init__(self, digest: str, path: str = ""):
        self.digest = digest
        self.path = path
        where = f"{digest[:12]}:{path}" if path else digest[:12]
        super().__init__(f"Not found in commit store: {where}")


class DigestMismatchError(StorageFailure):
    """Stored snapshot no longer hashes to its digest."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Digest verification failed for snapshot {expected[:12]}\n"
            f"  Expected: {expected}\n"
            f"  Got:      {actual}\n"
            f"The stored copy may be corrupted or tampered with."
        )
