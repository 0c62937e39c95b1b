"""
Provisioning script for group types and their internal roles.

Idempotent: existing group types are kept; missing internal roles are added.
Run via: python -m groupaccess.cli.provision

Reads configuration from environment variables:
  GROUPACCESS_BOOTSTRAP_GROUP_TYPES - Comma-separated ``id[:label]`` entries (required)
  GROUPACCESS_STORE__BACKEND        - Store backend (memory or filesystem)
  GROUPACCESS_STORE__FILESYSTEM__ROOT_DIR - Directory for the filesystem backend
"""

import asyncio
import logging
import os
import sys

from groupaccess.errors import GroupAccessError
from groupaccess.storage import close_store, init_store

# Use stdlib logging: structlog isn't configured yet during provisioning
logger = logging.getLogger("groupaccess.provision")


def parse_group_types(raw: str) -> list[tuple[str, str]]:
    """Parse ``id[:label]`` entries, skipping blanks."""
    entries = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        group_type_id, _, label = item.partition(":")
        group_type_id = group_type_id.strip()
        entries.append((group_type_id, label.strip() or group_type_id))
    return entries


async def provision() -> int:
    raw = os.environ.get("GROUPACCESS_BOOTSTRAP_GROUP_TYPES", "").strip()
    if not raw:
        logger.error("GROUPACCESS_BOOTSTRAP_GROUP_TYPES is required")
        return 1

    entries = parse_group_types(raw)
    if not entries:
        logger.error("GROUPACCESS_BOOTSTRAP_GROUP_TYPES contains no group types")
        return 1

    try:
        store = await init_store()
        existing = {gt.id for gt in await store.load_group_types()}
        for group_type_id, label in entries:
            await store.create_group_type(group_type_id, label)
            if group_type_id in existing:
                logger.info("Group type %s already exists, checked internal roles", group_type_id)
            else:
                logger.info("Created group type: %s", group_type_id)
    except (GroupAccessError, OSError) as e:
        logger.error("Provisioning failed: %s", e)
        return 1
    finally:
        await close_store()

    logger.info("Provisioning complete")
    return 0


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    sys.exit(asyncio.run(provision()))


if __name__ == "__main__":
    main()
