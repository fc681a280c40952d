"""Bulk blob maintenance: prefix renames and namespace cleanup. Admin only."""

import logging
from typing import Any

from core.errors import ValidationError
from core.store import BlobStore

logger = logging.getLogger(__name__)


def migrate_blobs(
    store: BlobStore,
    old_prefix: str,
    new_prefix: str,
    *,
    dry_run: bool = True,
    delete_source: bool = False,
) -> dict[str, Any]:
    """Copy every key under ``old_prefix`` to the same key under ``new_prefix``.

    With ``delete_source`` the source keys are removed after copying (a rename).
    """
    if not old_prefix:
        raise ValidationError("oldPrefix is required")
    if old_prefix == new_prefix:
        raise ValidationError("oldPrefix and newPrefix must differ")

    moves = [(key, new_prefix + key[len(old_prefix):]) for key in list(store.list(old_prefix))]
    if not dry_run:
        for src, dst in moves:
            data = store.get(src)
            if data is None:
                continue
            store.set(dst, data)
            if delete_source:
                store.delete(src)

    logger.info("migrate_blobs %r -> %r: %d keys (dry_run=%s)", old_prefix, new_prefix, len(moves), dry_run)
    return {
        "oldPrefix": old_prefix,
        "newPrefix": new_prefix,
        "dryRun": dry_run,
        "deleteSource": delete_source,
        "movedCount": 0 if dry_run else len(moves),
        "moves": [{"from": src, "to": dst} for src, dst in moves],
    }


def cleanup_blobs(store: BlobStore, prefix: str = "", *, dry_run: bool = True) -> dict[str, Any]:
    """Delete every key under ``prefix``. A dry run only lists them."""
    keys = list(store.list(prefix))
    deleted = []
    if not dry_run:
        for key in keys:
            store.delete(key)
            deleted.append(key)

    logger.info("cleanup_blobs %r: %d listed, %d deleted (dry_run=%s)", prefix, len(keys), len(deleted), dry_run)
    listed_not_deleted = [] if not dry_run else keys
    return {
        "prefix": prefix,
        "dryRun": dry_run,
        "deletedCount": len(deleted),
        "deleted": deleted,
        "listedNotDeletedCount": len(listed_not_deleted),
        "listedNotDeleted": listed_not_deleted,
    }
