"""Unit tests for database migrator."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

from roastledger.core.exceptions import DatabaseError
from roastledger.infrastructure.storage.sqlite.migrations.migrator import (
    LEDGER_TRIGGERS,
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)

MIGRATOR = "roastledger.infrastructure.storage.sqlite.migrations.migrator"


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_traceability.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "traceability"
        assert info.path == migration_file
        assert len(info.checksum) == 16

    def test_different_content_different_checksum(self, tmp_path: Path):
        file1 = tmp_path / "v001_a.sql"
        file1.write_text("SELECT 1;")
        file2 = tmp_path / "v002_b.sql"
        file2.write_text("SELECT 2;")

        assert MigrationInfo.from_file(file1).checksum != MigrationInfo.from_file(file2).checksum

    def test_invalid_filename_raises(self, tmp_path: Path):
        """from_file() raises ValueError for invalid filename."""
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestMigrationResult:
    def test_failed_result(self):
        result = MigrationResult(
            version="001",
            name="traceability",
            success=False,
            execution_time_ms=50,
            error="SQL syntax error",
        )

        assert result.success is False
        assert result.error == "SQL syntax error"


class TestVersionQueries:
    """Tests for get_applied_migrations() and get_current_version()."""

    async def test_empty_database(self, tmp_path: Path):
        """Both queries tolerate a missing schema_migrations table."""
        async with aiosqlite.connect(tmp_path / "test.db") as conn:
            assert await get_applied_migrations(conn) == {}
            assert await get_current_version(conn) is None

    async def test_returns_latest_version(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "test.db") as conn:
            await conn.execute(
                "CREATE TABLE schema_migrations (version TEXT PRIMARY KEY, checksum TEXT)"
            )
            await conn.executemany(
                "INSERT INTO schema_migrations (version, checksum) VALUES (?, ?)",
                [("001", "abc"), ("002", "def")],
            )

            assert await get_applied_migrations(conn) == {"001": "abc", "002": "def"}
            assert await get_current_version(conn) == "002"


class TestDiscoverMigrations:
    def test_bundled_migrations(self):
        """The traceability schema ships as the first migration."""
        migrations = discover_migrations()

        assert migrations[0].version == "001"
        assert migrations[0].name == "traceability"

    def test_skips_invalid_files_and_sorts(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vbad.sql").write_text("SELECT 3;")

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", tmp_path):
            migrations = discover_migrations()

        assert [m.version for m in migrations] == ["001", "002"]


class TestBackup:
    def test_backup_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"
        db_path.write_bytes(b"original")

        backup_path = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup_path)

        assert backup_path.exists()
        assert db_path.read_bytes() == b"original"


class TestInitializeDatabase:
    async def test_applies_schema(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"

        results = await initialize_database(db_path, create_backup_before=False)

        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_idempotent(self, tmp_path: Path):
        """A second run applies nothing and removes its backup."""
        db_path = tmp_path / "roastledger.db"
        await initialize_database(db_path, create_backup_before=False)

        results = await initialize_database(db_path)

        assert results == []
        assert list(tmp_path.glob("*.backup_*")) == []

    async def test_no_migrations_found(self, tmp_path: Path):
        empty_dir = tmp_path / "migrations"
        empty_dir.mkdir()

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", empty_dir):
            results = await initialize_database(tmp_path / "x.db", create_backup_before=False)

        assert results == []

    async def test_failed_migration_stops(self, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_broken.sql").write_text("CREATE TABLE (;")

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            results = await initialize_database(tmp_path / "x.db", create_backup_before=False)

        assert len(results) == 1
        assert results[0].success is False
        assert results[0].error

    async def test_failed_migration_leaves_no_partial_schema(self, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_half.sql").write_text(
            "CREATE TABLE first_half (id TEXT);\nCREATE TABLE (;"
        )
        db_path = tmp_path / "x.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path, create_backup_before=False)

        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert "first_half" not in tables
            assert await get_applied_migrations(conn) == {}

    async def test_edited_migration_is_rejected(self, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        migration = migrations_dir / "v001_stock.sql"
        migration.write_text("CREATE TABLE stock (id TEXT);")
        db_path = tmp_path / "x.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path, create_backup_before=False)
            migration.write_text("CREATE TABLE stock (id TEXT, qty REAL);")

            with pytest.raises(DatabaseError, match="edited"):
                await initialize_database(db_path)

        # The backup taken before the failed run is restored and kept
        assert len(list(tmp_path.glob("*.backup_*"))) == 1


class TestMigrationStatus:
    async def test_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")

        assert status["exists"] is False
        assert status["current_version"] is None

    async def test_migrated_database(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"
        await initialize_database(db_path, create_backup_before=False)

        status = await get_migration_status(db_path)

        assert status["current_version"] == "001"
        assert status["pending_migrations"] == []


class TestVerifySchemaIntegrity:
    async def test_fresh_schema_passes(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"
        await initialize_database(db_path, create_backup_before=False)

        checks = await verify_schema_integrity(db_path)

        assert {c["check"] for c in checks} == {
            "integrity",
            "required_tables",
            "ledger_immutability_triggers",
            "ledger_balance",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_missing_trigger_fails(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"
        await initialize_database(db_path, create_backup_before=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(f"DROP TRIGGER {LEDGER_TRIGGERS[1]}")
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(db_path)}

        assert checks["ledger_immutability_triggers"]["status"] == "FAIL"
        assert checks["ledger_immutability_triggers"]["missing"] == [LEDGER_TRIGGERS[1]]

    async def test_drifted_quantity_fails(self, tmp_path: Path):
        db_path = tmp_path / "roastledger.db"
        await initialize_database(db_path, create_backup_before=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute(
                """
                INSERT INTO stock_items (
                    id, kind, variety, quantity_kg, location,
                    version, last_updated, created_at
                ) VALUES ('ST1', 'green_bean', 'arabica', 5, 'Gudang', 0, '2026-01-01', '2026-01-01')
                """
            )
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(db_path)}

        assert checks["ledger_balance"]["status"] == "FAIL"
        assert checks["ledger_balance"]["drifted_stock_items"] == ["ST1"]
