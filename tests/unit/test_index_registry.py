"""
Unit tests for IndexRegistry and the built-in filter predicates.
"""

import pytest

from fim.core.errors import DuplicateIndexError, InvalidArgumentError, UnknownIndexError
from fim.core.filters import BUILTIN_INDEXES, accept_all, extension_equals, name_matches
from fim.core.models import DirectoryEntry, FileRecord
from fim.core.registry import IndexRegistry


def _file(name: str, parent: str = "/project") -> DirectoryEntry:
    return DirectoryEntry(name=name, full_path=f"{parent}/{name}", is_file=True)


class TestRegisterIndex:
    """Registration validation and dirty marking."""

    def test_new_registry_starts_dirty(self):
        registry = IndexRegistry()

        assert registry.is_dirty
        assert len(registry) == 0

    def test_register_adds_empty_index(self):
        registry = IndexRegistry()

        index = registry.register_index("py", extension_equals(".py"))

        assert "py" in registry
        assert index.records == ()
        assert registry.get("py") is index

    def test_register_marks_dirty_and_bumps_generation(self):
        registry = IndexRegistry()
        registry.clear_dirty(registry.generation)
        generation = registry.generation

        registry.register_index("py", extension_equals(".py"))

        assert registry.is_dirty
        assert registry.generation > generation

    def test_duplicate_name_rejected(self):
        registry = IndexRegistry()
        registry.register_index("py", extension_equals(".py"))

        with pytest.raises(DuplicateIndexError) as exc_info:
            registry.register_index("py", accept_all())

        assert exc_info.value.index_name == "py"
        assert len(registry) == 1

    def test_non_callable_predicate_rejected(self):
        registry = IndexRegistry()

        with pytest.raises(InvalidArgumentError):
            registry.register_index("broken", ".py")

        assert "broken" not in registry

    @pytest.mark.parametrize("name", ["", None, 42])
    def test_invalid_name_rejected(self, name):
        registry = IndexRegistry()

        with pytest.raises(InvalidArgumentError):
            registry.register_index(name, accept_all())

    def test_invalid_argument_is_value_error(self):
        registry = IndexRegistry()

        with pytest.raises(ValueError):
            registry.register_index("broken", None)

    def test_names_in_registration_order(self):
        registry = IndexRegistry()
        for name in ["zeta", "alpha", "mid"]:
            registry.register_index(name, accept_all())

        assert registry.names() == ["zeta", "alpha", "mid"]
        assert [index.name for index in registry] == ["zeta", "alpha", "mid"]


class TestDirtyFlag:
    """Generation-guarded dirty flag."""

    def test_clear_dirty_with_current_generation(self):
        registry = IndexRegistry()

        assert registry.clear_dirty(registry.generation) is True
        assert not registry.is_dirty

    def test_clear_dirty_refused_after_invalidation(self):
        registry = IndexRegistry()
        generation = registry.generation

        registry.mark_dirty()

        assert registry.clear_dirty(generation) is False
        assert registry.is_dirty

    def test_mark_dirty_is_idempotent(self):
        registry = IndexRegistry()
        registry.mark_dirty()
        registry.mark_dirty()

        assert registry.is_dirty
        assert registry.clear_dirty(registry.generation) is True


class TestLookup:
    def test_unknown_index_raises(self):
        registry = IndexRegistry()

        with pytest.raises(UnknownIndexError) as exc_info:
            registry.get("missing")

        assert exc_info.value.index_name == "missing"
        assert "missing" in str(exc_info.value)

    def test_unknown_index_is_key_error(self):
        registry = IndexRegistry()

        with pytest.raises(KeyError):
            registry.get("missing")

    def test_replace_records_exposes_tuple(self):
        registry = IndexRegistry()
        index = registry.register_index("all", accept_all())
        records = [FileRecord("a.txt", "/project/a.txt")]

        index.replace_records(records)
        records.append(FileRecord("b.txt", "/project/b.txt"))

        assert index.records == (FileRecord("a.txt", "/project/a.txt"),)
        assert len(index) == 1


class TestFilters:
    """Built-in predicates evaluated against directory entries."""

    def test_accept_all(self):
        assert accept_all()(_file("anything.bin"))

    def test_extension_equals_is_case_sensitive(self):
        css = extension_equals(".css")

        assert css(_file("style.css"))
        assert not css(_file("reset.CSS"))
        assert not css(_file("style.scss.map"))

    def test_extension_equals_matches_literal_suffix(self):
        assert extension_equals(".css")(_file("theme.min.css"))
        assert not extension_equals(".css")(_file("css"))

    def test_name_matches_glob(self):
        tests = name_matches("test_*.py")

        assert tests(_file("test_sync.py"))
        assert not tests(_file("sync_test.py"))

    def test_builtin_indexes(self):
        assert list(BUILTIN_INDEXES) == ["all", "css"]
        assert BUILTIN_INDEXES["css"] == extension_equals(".css")
