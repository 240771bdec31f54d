"""
Versioned schema migrations for the ledger database.

Migration files live next to this module as ``vNNN_name.sql`` and are applied
in version order. Each file runs in one transaction together with its row in
``schema_migrations``, so a failing file leaves no partial schema behind.
An applied file whose checksum changed stops the run: the ledger schema is
never re-applied on top of itself.

Usage:
    python -m roastledger.infrastructure.storage.sqlite.migrations.migrator
    python -m roastledger.infrastructure.storage.sqlite.migrations.migrator --status
    python -m roastledger.infrastructure.storage.sqlite.migrations.migrator --verify
"""

import asyncio
import hashlib
import re
import shutil
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from roastledger.config import get_logger, get_settings
from roastledger.core.exceptions import DatabaseError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

MIGRATION_FILENAME = re.compile(r"^v(\d+)_(\w+)\.sql$")

TRACKING_TABLE = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    checksum TEXT,
    applied_at TEXT DEFAULT (datetime('now')),
    execution_time_ms INTEGER
)
"""

REQUIRED_TABLES = [
    "schema_migrations",
    "stock_items",
    "ledger_entries",
    "suppliers",
    "purchase_orders",
    "roast_events",
    "blend_events",
    "sales",
    "expenses",
    "packaging",
    "alert_settings",
]

LEDGER_TRIGGERS = [
    "trg_ledger_entries_no_update",
    "trg_ledger_entries_no_delete",
]


@dataclass(frozen=True)
class MigrationInfo:
    """One migration file."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILENAME.match(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=digest[:16],
        )


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their checksums; empty before the first run."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, default=None)


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; misnamed files are skipped."""
    migrations = []
    for path in MIGRATIONS_DIR.glob("v*.sql"):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(migrations, key=lambda m: int(m.version))


def _pending(
    migrations: list[MigrationInfo], applied: dict[str, str]
) -> list[MigrationInfo]:
    pending = []
    for migration in migrations:
        recorded = applied.get(migration.version)
        if recorded is None:
            pending.append(migration)
        elif recorded != migration.checksum:
            raise DatabaseError(
                "migrate",
                f"migration v{migration.version} ({migration.name}) was edited after "
                f"it was applied: checksum {recorded} != {migration.checksum}",
            )
    return pending


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Run one migration file and record it, atomically."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.perf_counter()

    # version, name and checksum are constrained to digits, word chars and hex
    script = (
        "BEGIN;\n"
        f"{migration.path.read_text(encoding='utf-8')}\n;\n"
        "INSERT INTO schema_migrations (version, name, checksum) "
        f"VALUES ('{migration.version}', '{migration.name}', '{migration.checksum}');\n"
        "COMMIT;"
    )
    try:
        await conn.executescript(script)
    except aiosqlite.Error as e:
        if conn.in_transaction:
            await conn.rollback()
        elapsed = int((time.perf_counter() - start) * 1000)
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=elapsed,
            error=str(e),
        )

    elapsed = int((time.perf_counter() - start) * 1000)
    await conn.execute(
        "UPDATE schema_migrations SET execution_time_ms = ? WHERE version = ?",
        (elapsed, migration.version),
    )
    await conn.commit()

    violations = await (await conn.execute("PRAGMA foreign_key_check")).fetchall()
    if violations:
        logger.error(
            "migration_foreign_key_violations",
            version=migration.version,
            count=len(violations),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=elapsed,
            error=f"{len(violations)} foreign key violations",
        )

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed,
    )


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside, timestamped."""
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing file aside first; the copy is
            restored on failure and removed on success

    Returns:
        Results of the migrations that ran, stopping at the first failure

    Raises:
        DatabaseError: an applied migration file was edited
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    backup_path = None
    if create_backup_before and db_path.exists():
        backup_path = create_backup(db_path)

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")

            migrations = discover_migrations()
            if not migrations:
                logger.warning("no_migrations_found", migrations_dir=str(MIGRATIONS_DIR))
                return results

            await conn.execute(TRACKING_TABLE)
            await conn.commit()

            for migration in _pending(migrations, await get_applied_migrations(conn)):
                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

            logger.info(
                "database_initialized",
                schema_version=await get_current_version(conn),
                applied=len([r for r in results if r.success]),
            )
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup_path is not None and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None:
        if all(r.success for r in results):
            backup_path.unlink()
        else:
            restore_backup(db_path, backup_path)

    return results


# Name used by the application lifespan
run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    """Current version plus applied and pending migration versions."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied, default=None),
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


# =============================================================================
# Schema verification
# =============================================================================


async def _check_integrity(conn: aiosqlite.Connection) -> dict[str, Any]:
    row = await (await conn.execute("PRAGMA integrity_check")).fetchone()
    return {"status": "PASS" if row[0] == "ok" else "FAIL", "result": row[0]}


async def _existing(conn: aiosqlite.Connection, kind: str) -> set[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = ?", (kind,))
    return {row[0] for row in await cursor.fetchall()}


async def _check_tables(conn: aiosqlite.Connection) -> dict[str, Any]:
    existing = await _existing(conn, "table")
    missing = [t for t in REQUIRED_TABLES if t not in existing]
    return {"status": "FAIL" if missing else "PASS", "missing": missing}


async def _check_triggers(conn: aiosqlite.Connection) -> dict[str, Any]:
    existing = await _existing(conn, "trigger")
    missing = [t for t in LEDGER_TRIGGERS if t not in existing]
    return {"status": "FAIL" if missing else "PASS", "missing": missing}


async def _check_balances(conn: aiosqlite.Connection) -> dict[str, Any]:
    """Every stock item's quantity equals the sum of its ledger deltas."""
    tolerance = get_settings().valuation.quantity_tolerance
    cursor = await conn.execute(
        """
        SELECT s.id
        FROM stock_items s
        LEFT JOIN ledger_entries l ON l.stock_item_id = s.id
        GROUP BY s.id
        HAVING ABS(s.quantity_kg - COALESCE(SUM(l.delta), 0)) > ?
        ORDER BY s.id
        """,
        (tolerance,),
    )
    drifted = [row[0] for row in await cursor.fetchall()]
    return {"status": "FAIL" if drifted else "PASS", "drifted_stock_items": drifted}


SCHEMA_CHECKS: dict[str, Callable[[aiosqlite.Connection], Awaitable[dict[str, Any]]]] = {
    "integrity": _check_integrity,
    "required_tables": _check_tables,
    "ledger_immutability_triggers": _check_triggers,
    "ledger_balance": _check_balances,
}


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """
    Run every schema check.

    Returns:
        One dict per check with ``check`` and ``status`` (PASS or FAIL) plus
        check-specific findings
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []
    async with aiosqlite.connect(db_path) as conn:
        for name, check in SCHEMA_CHECKS.items():
            checks.append({"check": name, **await check(conn)})

    failed = [c["check"] for c in checks if c["status"] != "PASS"]
    if failed:
        logger.warning("schema_verification_failed", failed=failed)
    return checks


def main() -> None:
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Roast Ledger database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--status", action="store_true", help="Show migration status")
    mode.add_argument(
        "--verify", action="store_true", help="Verify schema and ledger balances"
    )
    parser.add_argument(
        "--no-backup", action="store_true", help="Skip the backup before migrating"
    )
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists:    {status['exists']}")
            print(f"Current version:    {status['current_version'] or '-'}")
            print(f"Applied migrations: {', '.join(status['applied_migrations']) or '-'}")
            print(f"Pending migrations: {', '.join(status['pending_migrations']) or '-'}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                print(f"[{check['status']}] {check['check']}")
                for key, value in check.items():
                    if check["status"] != "PASS" and key not in ("check", "status"):
                        print(f"       {key}: {value}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        results = await initialize_database(
            args.db_path, create_backup_before=not args.no_backup
        )
        if not results:
            print("Schema is up to date")
        for result in results:
            outcome = "OK" if result.success else "FAILED"
            print(f"[{outcome}] v{result.version} {result.name} ({result.execution_time_ms}ms)")
            if result.error:
                print(f"       {result.error}")
        return 0 if all(r.success for r in results) else 1

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
