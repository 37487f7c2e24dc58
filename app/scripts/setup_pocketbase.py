"""
    Provisions the PocketBase images collection.

    Usage: python -m app.scripts.setup_pocketbase

    With POCKETBASE_ADMIN_EMAIL / POCKETBASE_ADMIN_PASSWORD set, a missing
    collection is created. Without them the script only reports whether the
    collection is reachable.
"""
import asyncio
import logging
import sys

from app.settings import settings
from app.storage.pocketbase import PocketBaseService, PocketBaseError

log = logging.getLogger("setup-pocketbase")

async def setup_collection(db: PocketBaseService, startup_wait: float = 2.0) -> bool:
    """Returns True once the collection exists and can be listed."""
    # PocketBase may still be starting next to us
    await asyncio.sleep(startup_wait)
    try:
        await db.check_ready()
        log.info("%s collection already exists", db.collection)
        return True
    except PocketBaseError as e:
        if e.status != 404:
            raise

    if not (settings.pocketbase_admin_email and settings.pocketbase_admin_password):
        log.warning(
            "%s collection is missing and no admin credentials are configured; "
            "create it from the PocketBase admin UI or a migration",
            db.collection,
        )
        return False

    log.info("Creating %s collection...", db.collection)
    await db.ensure_collection(settings.pocketbase_admin_email, settings.pocketbase_admin_password)
    return True

async def main() -> int:
    db = PocketBaseService()
    try:
        ready = await setup_collection(db)
    except PocketBaseError as e:
        log.error("Error setting up PocketBase collection: %s", e.message)
        return 1
    finally:
        await db.close()
    return 0 if ready else 1

if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    sys.exit(asyncio.run(main()))
