"""Wipe every student and ledger entry from the configured database."""
import sys

from hallpass.core.config import settings
from hallpass.core.exceptions import StorageError
from hallpass.services.store import init_store

if "--yes" not in sys.argv:
    answer = input(f"Delete ALL students and ledger entries in {settings.DATABASE_URL}? [y/N] ")
    if answer.strip().lower() != "y":
        print("Aborted.")
        sys.exit(1)

store = init_store(settings.DATABASE_URL)
try:
    store.reset_all()
except StorageError as e:
    print(f"Reset failed: {e}")
    sys.exit(2)
finally:
    store.engine.dispose()

print("All students and ledger entries deleted.")
