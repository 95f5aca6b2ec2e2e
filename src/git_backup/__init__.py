"""git-backup: git_backup/__init__.py."""

__version__ = "0.3.0"

BACKUP_LOCK_NAME = "git-backup.lock"
