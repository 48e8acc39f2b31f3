"""
Comprehensive tests for migration registry (MigrationRegistry)
"""
from unittest.mock import patch

import pytest

from linkstash.migrations.errors import BrokenMigrationChain
from linkstash.migrations.migration_base import MigrationBase
from linkstash.migrations.registry import MigrationRegistry
from linkstash.migrations.schema import CURRENT_VERSION


class StepOne(MigrationBase):
    """Test migration v1"""
    version = 1
    description = "Test migration 1"

    def up(self, records):
        return records


class StepTwo(MigrationBase):
    """Test migration v2"""
    version = 2
    description = "Test migration 2"

    def up(self, records):
        return records


class StepThree(MigrationBase):
    """Test migration v3"""
    version = 3
    description = "Test migration 3"

    def up(self, records):
        return records


def manual_registry(*steps):
    registry = MigrationRegistry(versions_package=None)
    for step in steps:
        registry.register(step)
    return registry


class TestMigrationBase:
    """Validation done by MigrationBase"""

    def test_missing_version(self):
        class NoVersion(MigrationBase):
            description = "x"

            def up(self, records):
                return records

        with pytest.raises(ValueError, match="must define 'version'"):
            NoVersion()

    def test_missing_description(self):
        class NoDescription(MigrationBase):
            version = 1

            def up(self, records):
                return records

        with pytest.raises(ValueError, match="must define 'description'"):
            NoDescription()

    def test_version_must_be_positive(self):
        class Zero(MigrationBase):
            version = 0
            description = "x"

            def up(self, records):
                return records

        with pytest.raises(ValueError, match=">= 1"):
            Zero()

    def test_ordering_and_repr(self):
        assert StepOne() < StepTwo()
        assert StepOne() == StepOne()
        assert repr(StepTwo()) == "<Migration v2->v3: Test migration 2>"


class TestMigrationRegistry:
    """Test MigrationRegistry functionality"""

    def test_init(self):
        """Test registry initialization"""
        registry = MigrationRegistry()
        assert registry.versions_package == "linkstash.migrations.versions"
        assert registry._discovered is False
        assert len(registry._migrations) == 0

    def test_discover_shipped_migrations(self):
        """The shipped chain covers v1 -> v4"""
        registry = MigrationRegistry()
        migrations = registry.get_path(1, 4)

        assert [m.version for m in migrations] == [1, 2, 3]
        assert registry.get_latest_version() == 4
        registry.validate_chain(CURRENT_VERSION)

    def test_discover_is_idempotent(self):
        registry = MigrationRegistry()
        registry.discover()
        registry.discover()
        assert len(registry._migrations) == 3

    def test_discover_no_package(self):
        """Test discovery when versions package doesn't exist"""
        registry = MigrationRegistry(versions_package="nonexistent.package")

        with patch('importlib.import_module', side_effect=ImportError):
            registry.discover()

        assert registry._discovered is True
        assert len(registry._migrations) == 0
        assert registry.get_latest_version() == 0

    def test_register_duplicate(self):
        registry = manual_registry(StepOne())

        with pytest.raises(BrokenMigrationChain, match="Duplicate migration version 1"):
            registry.register(StepOne())

    def test_validate_sequence_gap(self):
        registry = manual_registry(StepOne(), StepThree())

        with pytest.raises(BrokenMigrationChain, match="expected 2, found 3"):
            registry._validate_sequence()

    def test_validate_sequence_wrong_start(self):
        registry = manual_registry(StepTwo(), StepThree())

        with pytest.raises(BrokenMigrationChain, match="must start at 1"):
            registry._validate_sequence()

    def test_validate_sequence_ok(self):
        registry = manual_registry(StepOne(), StepTwo(), StepThree())
        registry._validate_sequence()

    def test_get_path(self):
        registry = manual_registry(StepOne(), StepTwo(), StepThree())

        path = registry.get_path(1, 4)
        assert [m.version for m in path] == [1, 2, 3]
        assert [m.version for m in registry.get_path(2, 4)] == [2, 3]
        assert registry.get_path(4, 4) == []

    def test_get_path_with_gap(self):
        registry = manual_registry(StepOne(), StepThree())

        with pytest.raises(BrokenMigrationChain) as exc_info:
            registry.get_path(1, 4)

        assert "v2 to v3" in str(exc_info.value)
        assert exc_info.value.current_version == 1
        assert exc_info.value.target_version == 4

    def test_get_path_below_chain(self):
        registry = manual_registry(StepOne(), StepTwo(), StepThree())

        with pytest.raises(BrokenMigrationChain, match="v0 to v1"):
            registry.get_path(0, 4)

    def test_validate_chain_ok(self):
        registry = manual_registry(StepOne(), StepTwo(), StepThree())
        registry.validate_chain(4)

    def test_validate_chain_gap(self):
        registry = manual_registry(StepOne(), StepThree())

        with pytest.raises(BrokenMigrationChain, match="gap detected"):
            registry.validate_chain(4)

    def test_validate_chain_ends_early(self):
        registry = manual_registry(StepOne(), StepTwo())

        with pytest.raises(BrokenMigrationChain, match="ends at v3, expected v4") as exc_info:
            registry.validate_chain(4)

        assert exc_info.value.target_version == 4

    def test_validate_chain_overshoots(self):
        registry = manual_registry(StepOne(), StepTwo(), StepThree())

        with pytest.raises(BrokenMigrationChain, match="ends at v4, expected v3"):
            registry.validate_chain(3)

    def test_validate_chain_empty(self):
        with pytest.raises(BrokenMigrationChain, match="ends at v0"):
            manual_registry().validate_chain(4)

    def test_repr(self):
        registry = manual_registry(StepOne(), StepTwo())
        assert repr(registry) == "<MigrationRegistry: 2 migrations, latest v3>"
