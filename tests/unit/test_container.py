"""
Unit tests for service wiring, the project root provider and ignore matching.
"""

import pytest

from fim.core.config import FIMConfig, IndexingConfig
from fim.core.errors import TraversalLimitExceeded
from fim.core.file_events import FileEvent, FileEventType
from fim.core.ignore import IgnoreMatcher
from fim.infrastructure.fakes import FakeFileWatcher, InMemoryDirectoryLister
from fim.infrastructure.root_provider import ProjectRoot
from fim.services import create_file_index_manager, create_services, create_watch_service


class TestCreateFileIndexManager:
    def test_uses_configured_limit_and_patterns(self):
        config = FIMConfig(indexing=IndexingConfig(max_files=2, ignore_patterns=["vendor/"]))
        lister = InMemoryDirectoryLister.from_paths(
            "/project", ["vendor/lib.css", "a.css", "b.css", "c.css"]
        )
        hits: list[TraversalLimitExceeded] = []

        manager = create_file_index_manager(
            config=config, root="/project", lister=lister, on_limit_exceeded=hits.append
        )
        records = manager.get_index_records("css")

        assert manager.max_files == 2
        assert [r.name for r in records] == ["a.css", "b.css"]
        assert len(hits) == 1

    def test_builtin_indexes_registered(self):
        manager = create_file_index_manager(
            config=FIMConfig(), lister=InMemoryDirectoryLister("/project", {})
        )

        assert manager.index_names() == ["all", "css"]


class TestCreateServices:
    def test_services_share_root_provider(self, tmp_path, monkeypatch):
        monkeypatch.delenv("FIM_INDEXING_MAX_FILES", raising=False)
        (tmp_path / "site.css").write_text("")

        services = create_services(root=tmp_path)

        assert services.root_provider.get_project_root() == tmp_path.resolve()
        assert [r.name for r in services.manager.get_index_records("css")] == ["site.css"]

    def test_watch_service_wired_to_manager(self, tmp_path):
        services = create_services(root=tmp_path)
        watcher = FakeFileWatcher()
        service = create_watch_service(services, file_watcher=watcher)

        service.start()
        try:
            assert watcher.watch_path == tmp_path.resolve()
        finally:
            service.stop()


class TestWatchEnabled:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        monkeypatch.delenv("FIM_WATCH_ENABLED", raising=False)

    def test_disabled_by_default(self, tmp_path):
        services = create_services(root=tmp_path, file_watcher=FakeFileWatcher())

        assert services.watch_service is None

    def test_enabled_in_config_file_starts_watching(self, tmp_path):
        config = tmp_path / "fim.yaml"
        config.write_text("watch:\n  enabled: true\n")
        project = tmp_path / "project"
        project.mkdir()
        watcher = FakeFileWatcher()

        services = create_services(config_path=config, root=project, file_watcher=watcher)
        try:
            assert services.watch_service.is_running()
            assert watcher.started_paths == [project.resolve()]

            services.manager.get_index_records("all")
            watcher.trigger_event(FileEvent(FileEventType.CREATED, project / "new.css"))
            assert services.manager.is_dirty
        finally:
            services.close()

        assert not services.watch_service.is_running()
        assert not watcher.is_running()

    def test_enabled_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIM_WATCH_ENABLED", "true")
        watcher = FakeFileWatcher()

        services = create_services(root=tmp_path, file_watcher=watcher)
        try:
            assert services.watch_service.is_running()
        finally:
            services.close()

    def test_enabled_without_root_is_not_started(self, monkeypatch):
        monkeypatch.setenv("FIM_WATCH_ENABLED", "1")
        watcher = FakeFileWatcher()

        services = create_services(file_watcher=watcher)

        assert services.watch_service is not None
        assert not services.watch_service.is_running()
        assert watcher.started_paths == []


class TestProjectRoot:
    def test_listeners_notified_on_change_only(self, tmp_path):
        root = ProjectRoot(tmp_path)
        seen = []
        root.subscribe(seen.append)

        assert root.set_root(tmp_path) is False
        assert root.set_root(tmp_path / "other") is True
        assert root.set_root(None) is True

        assert seen == [(tmp_path / "other").resolve(), None]

    def test_unsubscribe(self, tmp_path):
        root = ProjectRoot(tmp_path)
        seen = []
        root.subscribe(seen.append)
        root.unsubscribe(seen.append)
        root.unsubscribe(seen.append)

        root.set_root(None)

        assert seen == []


class TestIgnoreMatcher:
    @pytest.mark.parametrize(
        "path,is_dir,expected",
        [
            ("node_modules", True, True),
            ("src/node_modules", True, True),
            ("node_modules", False, False),
            ("debug.log", False, True),
            ("logs/debug.log", False, True),
            ("src/app.css", False, False),
        ],
    )
    def test_gitignore_semantics(self, path, is_dir, expected):
        matcher = IgnoreMatcher(["node_modules/", "*.log"])

        assert matcher.matches(path, is_dir=is_dir) is expected

    def test_empty_matcher_matches_nothing(self):
        matcher = IgnoreMatcher(["", "  "])

        assert not matcher
        assert matcher.patterns == []
        assert matcher.matches("anything") is False
