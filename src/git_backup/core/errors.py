"""Failure categories of a backup run."""


class BackupError(Exception):
    """Base class for backup failures."""

    pass


class PreconditionError(BackupError):
    """The repository is not in a state a backup can be taken from.

    Raised before any object is written.
    """

    pass


class ObjectStoreError(BackupError):
    """Writing the tree or commit object failed."""

    pass


class PublishError(BackupError):
    """The backup branch could not be moved to the new commit."""

    pass


class PushError(BackupError):
    """Linking or pushing to the remote failed.

    Never fatal: the local backup is already published when this is raised.
    """

    pass
