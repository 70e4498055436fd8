#!/usr/bin/env python3
"""
Verification script for the configured HiveMind data store.

This script checks:
1. Store configuration in the environment / .env is valid
2. The store can be opened and every collection listed
3. The session record can be read

With HIVEMIND_STORE=api, steps 2 and 3 double as a json-server connectivity test.
"""

import sys

from hivemind.domains.errors import StorageError
from hivemind.infrastructure.data.store import COLLECTIONS, SESSION
from hivemind.services.factory import build_store
from hivemind.utils import config
from hivemind.utils.logger import setup_logger


def check_config() -> tuple[bool, list[str]]:
    """Check that the store settings parse."""
    results = []
    try:
        backend = config.store_backend()
    except ValueError as e:
        return False, [f"[X] {e}"]
    results.append(f"[OK] HIVEMIND_STORE = {backend}")
    if backend == "json":
        results.append(f"[OK] Data directory: {config.data_dir()}")
    elif backend == "api":
        results.append(f"[OK] API URL: {config.api_url()} (timeout {config.api_timeout()}s)")
    return True, results


def check_collections() -> tuple[bool, list[str]]:
    """Open the store and count documents per collection."""
    results = []
    try:
        store = build_store()
    except (StorageError, ValueError) as e:
        return False, [f"[X] Could not open store: {e}"]
    all_ok = True
    for collection in COLLECTIONS:
        try:
            n = len(store.list_all(collection))
            results.append(f"[OK] {collection}: {n} documents")
        except StorageError as e:
            results.append(f"[X] {collection}: {e}")
            all_ok = False
    try:
        record = store.get_singleton(SESSION)
        who = record.get("userId") if record else None
        results.append(f"[OK] session: {'signed in as ' + who if who else 'signed out'}")
    except StorageError as e:
        results.append(f"[X] session: {e}")
        all_ok = False
    return all_ok, results


def main():
    """Run all verification checks."""
    setup_logger(level=config.log_level(), log_file=config.log_file())
    print("Verifying HiveMind data store\n")
    print("=" * 60)

    all_checks_passed = True

    print("\n1. Checking configuration...")
    ok, msgs = check_config()
    for msg in msgs:
        print(f"   {msg}")
    if not ok:
        all_checks_passed = False

    if all_checks_passed:
        print("\n2. Reading collections...")
        ok, msgs = check_collections()
        for msg in msgs:
            print(f"   {msg}")
        if not ok:
            all_checks_passed = False

    print("\n" + "=" * 60)

    if all_checks_passed:
        print("\n[OK] Store is reachable and readable.")
        return 0
    print("\n[X] Some checks failed. Please fix the issues above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
