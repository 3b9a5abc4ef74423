"""Replace the local record store with a backup file.

Usage:
    python -m prontuario.scripts.import_backup <backup.json> --pin <PIN>

Every patient and event currently stored is deleted first. The file is fully
validated before anything is touched; an invalid file leaves the store as it
was. The PIN must match the one in effect, exactly as in the app.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from prontuario.database import engine
from prontuario.exceptions import AccessDeniedError, InvalidBackupError
from prontuario.repositories import RecordStore
from prontuario.services.backup import BackupEngine
from prontuario.services.pin import PinCheck, effective_pin
from prontuario.services.session import open_session


async def import_backup(backup_path: Path, pin: str) -> tuple[int, int]:
    """Import ``backup_path`` into the configured database.

    Returns:
        Number of patients and events imported.
    """
    store = RecordStore(engine)
    try:
        session = await open_session(store)
        gate = PinCheck(pin, effective_pin(session.settings))
        snapshot = await BackupEngine(store).import_snapshot(
            session, backup_path.read_bytes(), gate
        )
    finally:
        await engine.dispose()
    return len(snapshot.patients), len(snapshot.events)


def main() -> None:
    """Main entry point for the import script."""
    parser = argparse.ArgumentParser(description="Import a prontuário backup file")
    parser.add_argument("backup", type=Path, help="Backup JSON file")
    parser.add_argument("--pin", required=True, help="Access PIN")
    args = parser.parse_args()

    if not args.backup.is_file():
        print(f"Backup file not found: {args.backup}")
        sys.exit(1)

    try:
        patients, events = asyncio.run(import_backup(args.backup, args.pin))
    except (AccessDeniedError, InvalidBackupError) as e:
        print(f"Import aborted: {e}")
        sys.exit(1)

    print(f"  Patients imported: {patients}")
    print(f"  Events imported: {events}")
    print("\nImport complete!")


if __name__ == "__main__":
    main()
