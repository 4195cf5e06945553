"""
Local attachment store.

Each message keeps its uploaded files under ATTACHMENTS_ROOT/<message_id>.
When a message is deactivated its files are made unreadable in place.
"""

import os
from pathlib import Path

from loguru import logger

from models.config import settings
from models.exceptions import AttachmentLockdownFailure

LOCKED_MODE = 0o000


class AttachmentStore:
    """Filesystem operations on message attachments."""

    @classmethod
    def attachment_dir(cls, message_id: int) -> Path:
        """Directory holding the files of one message."""
        return Path(settings.ATTACHMENTS_ROOT) / str(message_id)

    @classmethod
    def _lock_down(cls, message_id: int, root: Path) -> None:
        """
        Remove every permission bit below root, deepest entries first.

        Raises:
            AttachmentLockdownFailure: If any chmod fails
        """

        def _raise(error: OSError) -> None:
            raise error

        try:
            for dirpath, dirnames, filenames in os.walk(
                root, topdown=False, onerror=_raise
            ):
                for name in filenames + dirnames:
                    os.chmod(os.path.join(dirpath, name), LOCKED_MODE)
            os.chmod(root, LOCKED_MODE)
        except OSError as e:
            raise AttachmentLockdownFailure(message_id, str(e)) from e

    @classmethod
    def restrict_access(cls, message_id: int) -> bool:
        """
        Make the attachments of a message inaccessible.

        Best-effort: failures are logged and reported through the return
        value, never raised.

        Args:
            message_id: Message whose files should be locked

        Returns:
            True if files were locked down, False if there was nothing to do
            or the lockdown failed
        """
        if not settings.ATTACHMENT_LOCKDOWN_ENABLED:
            logger.debug("Attachment lockdown disabled, skipping")
            return False

        root = cls.attachment_dir(message_id)
        if not root.is_dir():
            return False

        try:
            cls._lock_down(message_id, root)
        except AttachmentLockdownFailure as e:
            logger.warning(e.message)
            return False

        logger.info(f"Attachments of message {message_id} locked down at {root}")
        return True
