"""Export the local record store to a backup file.

Usage:
    python -m prontuario.scripts.export_backup [output_dir]

Writes ``prontuario_backup_YYYY-MM-DD.json`` into ``output_dir`` (the
current directory by default).
"""

import asyncio
import sys
from pathlib import Path

from prontuario.database import engine
from prontuario.repositories import RecordStore
from prontuario.services.backup import BackupEngine, backup_filename, dump_snapshot


async def export_backup(output_dir: Path) -> tuple[Path, int, int]:
    """Write a snapshot of the store to ``output_dir``.

    Returns:
        The file written and the number of patients and events in it.
    """
    store = RecordStore(engine)
    try:
        await store.init()
        snapshot = await BackupEngine(store).export_snapshot()
    finally:
        await engine.dispose()

    target = output_dir / backup_filename(snapshot.exported_at)
    target.write_text(dump_snapshot(snapshot), encoding="utf-8")
    return target, len(snapshot.patients), len(snapshot.events)


def main() -> None:
    """Main entry point for the export script."""
    output_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    if not output_dir.is_dir():
        print(f"Output directory not found: {output_dir}")
        sys.exit(1)

    target, patients, events = asyncio.run(export_backup(output_dir))

    print(f"  Patients: {patients}")
    print(f"  Events: {events}")
    print(f"\nBackup written to {target}")


if __name__ == "__main__":
    main()
