"""Core backup operations for git-backup.

One module per stage of a run: resolver, stager, objects, publisher and
upstream, tied together by backup.create_backup.
"""

from .backup import BackupResult, create_backup
from .errors import (
    BackupError,
    ObjectStoreError,
    PreconditionError,
    PublishError,
    PushError,
)
from .upstream import UpstreamResult, remote_branch_path, sanitize_identity

__all__ = [
    "BackupError",
    "BackupResult",
    "ObjectStoreError",
    "PreconditionError",
    "PublishError",
    "PushError",
    "UpstreamResult",
    "create_backup",
    "remote_branch_path",
    "sanitize_identity",
]
