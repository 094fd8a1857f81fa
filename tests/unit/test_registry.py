"""Tests for the YAML definition registry."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from viewstack.core.config import RegistryConfig
from viewstack.core.exceptions import InvalidElementError
from viewstack.elements import ElementFactory, ElementRegistry, View
from viewstack.elements.registry import DefinitionChangeHandler


@pytest.fixture
def registry(definitions_dir):
    registry = ElementRegistry([str(definitions_dir)])
    registry.load_all()
    return registry


class TestLoading:
    """Tests for discovery and lookup."""

    def test_kinds_from_directories(self, registry):
        """Should take kinds from directories, root for top-level files."""
        assert set(registry.list_kinds()) == {"pages", "fields", "root"}

    def test_names_from_file_stems(self, registry):
        """Should take names from file stems."""
        assert registry.list_names("pages") == ["profile"]
        assert registry.list_names("fields") == ["search"]
        assert registry.list_names("root") == ["footer"]

    def test_get_raw_definition(self, registry):
        """Should return the raw definition."""
        definition = registry.get("fields", "search")
        assert definition == {"name": "q", "type": "input", "label": "Search"}

    def test_get_unknown_returns_none(self, registry):
        """Should return None for unknown definitions."""
        assert registry.get("pages", "missing") is None
        assert registry.get("missing", "profile") is None

    def test_get_all(self, registry):
        """Should return every definition of a kind."""
        assert set(registry.get_all("pages")) == {"profile"}
        assert registry.get_all("missing") == {}

    def test_contains(self, registry):
        """Should support (kind, name) membership."""
        assert ("pages", "profile") in registry
        assert ("pages", "missing") not in registry

    def test_missing_path_is_skipped(self, tmp_path, caplog):
        """Should warn about and skip a missing path."""
        registry = ElementRegistry([str(tmp_path / "nope")])
        with caplog.at_level(logging.WARNING):
            registry.load_all()
        assert registry.list_kinds() == []
        assert "does not exist" in caplog.text

    def test_bad_yaml_is_logged_and_skipped(self, definitions_dir, caplog):
        """Should warn about and skip invalid YAML."""
        (definitions_dir / "pages" / "broken.yaml").write_text("title: [unclosed\n")
        registry = ElementRegistry([str(definitions_dir)])
        with caplog.at_level(logging.WARNING):
            registry.load_all()
        assert ("pages", "broken") not in registry
        assert ("pages", "profile") in registry
        assert "Failed to load" in caplog.text

    def test_non_mapping_yaml_is_skipped(self, definitions_dir, caplog):
        """Should skip YAML that is not a mapping."""
        (definitions_dir / "pages" / "list.yaml").write_text("- a\n- b\n")
        registry = ElementRegistry([str(definitions_dir)])
        with caplog.at_level(logging.WARNING):
            registry.load_all()
        assert ("pages", "list") not in registry
        assert "must be a mapping" in caplog.text

    def test_empty_file_is_skipped(self, definitions_dir):
        """Should skip empty files."""
        (definitions_dir / "pages" / "empty.yaml").write_text("")
        registry = ElementRegistry([str(definitions_dir)])
        registry.load_all()
        assert ("pages", "empty") not in registry

    def test_load_all_replaces_previous(self, registry, definitions_dir):
        """Should forget definitions whose files are gone."""
        (definitions_dir / "footer.yaml").unlink()
        registry.load_all()
        assert ("root", "footer") not in registry


class TestBuild:
    """Tests for building elements from definitions."""

    def test_build_view(self, registry):
        """Should build a view with ordered children."""
        view = registry.build("pages", "profile")
        assert isinstance(view, View)
        assert view.get_name() == "profile"
        assert [c.get_name() for c in view] == ["avatar", "email"]

    def test_build_uses_definition_name(self, registry):
        """Should keep the name given in the definition."""
        assert registry.build("fields", "search").get_name() == "q"

    def test_build_name_override(self, registry):
        """Should apply a name override."""
        assert registry.build("fields", "search", {"name": "query"}).get_name() == "query"

    def test_build_returns_fresh_instances(self, registry):
        """Should build a fresh instance every time."""
        first = registry.build("pages", "profile")
        second = registry.build("pages", "profile")
        assert first is not second
        first.remove("email")
        assert second.has("email")
        assert "name" not in registry.get("pages", "profile")

    def test_build_unknown_raises(self, registry):
        """Should raise for an unknown definition."""
        with pytest.raises(InvalidElementError):
            registry.build("pages", "missing")

    def test_build_uses_given_factory(self, definitions_dir):
        """Should build through the given factory."""
        factory = MagicMock(spec=ElementFactory)
        registry = ElementRegistry([str(definitions_dir)], factory=factory)
        registry.load_all()
        registry.build("root", "footer")
        factory.create.assert_called_once_with({"name": "footer", "title": "Footer"})

    def test_from_config(self, definitions_dir):
        """Should load from a RegistryConfig."""
        registry = ElementRegistry.from_config(RegistryConfig(paths=[str(definitions_dir)]))
        assert ("pages", "profile") in registry
        assert not registry.watching


class TestReload:
    """Tests for reload and change listeners."""

    def test_reload_updates_definition(self, registry, definitions_dir):
        """Should pick up a changed file."""
        path = definitions_dir / "fields" / "search.yml"
        path.write_text("name: q\nlabel: Find\n")
        registry.reload(str(path))
        assert registry.get("fields", "search")["label"] == "Find"

    def test_reload_notifies_listeners(self, registry, definitions_dir):
        """Should notify listeners after reload."""
        listener = MagicMock()
        registry.on_change(listener)
        registry.reload(str(definitions_dir / "pages" / "profile.yaml"))
        listener.assert_called_once_with("pages", "profile")

    def test_listener_error_is_logged(self, registry, definitions_dir, caplog):
        """Should log a failing listener and keep notifying."""
        def failing(kind, name):
            raise ValueError("listener boom")

        good = MagicMock()
        registry.on_change(failing)
        registry.on_change(good)
        with caplog.at_level(logging.ERROR):
            registry.reload(str(definitions_dir / "footer.yaml"))
        assert "Listener error on root/footer" in caplog.text
        good.assert_called_once_with("root", "footer")

    def test_discard_drops_definition_and_notifies(self, registry, definitions_dir):
        """Should forget a deleted file and notify listeners."""
        listener = MagicMock()
        registry.on_change(listener)
        path = definitions_dir / "fields" / "search.yml"
        path.unlink()
        registry.discard(str(path))
        assert ("fields", "search") not in registry
        listener.assert_called_once_with("fields", "search")

    def test_discard_unknown_file_is_silent(self, registry, definitions_dir):
        """Should not notify for a file it never loaded."""
        listener = MagicMock()
        registry.on_change(listener)
        registry.discard(str(definitions_dir / "pages" / "missing.yaml"))
        listener.assert_not_called()

    def test_reload_of_new_file_adds_definition(self, registry, definitions_dir):
        """Should add a definition for a new file."""
        path = definitions_dir / "pages" / "login.yaml"
        path.write_text("title: Login\n")
        registry.reload(str(path))
        assert registry.list_names("pages") == ["profile", "login"]


class TestWatching:
    """Tests for file system watching."""

    def test_handler_reloads_created_and_modified_files(self):
        """Should reload a definition file when it is created or modified."""
        registry = MagicMock()
        handler = DefinitionChangeHandler(registry)
        handler.dispatch(FileModifiedEvent("/defs/pages/a.yaml"))
        handler.dispatch(FileCreatedEvent("/defs/pages/b.yml"))
        assert [c.args[0] for c in registry.reload.call_args_list] == [
            "/defs/pages/a.yaml",
            "/defs/pages/b.yml",
        ]

    def test_handler_discards_deleted_files(self):
        """Should drop the definition of a deleted file."""
        registry = MagicMock()
        DefinitionChangeHandler(registry).dispatch(FileDeletedEvent("/defs/pages/a.yaml"))
        registry.discard.assert_called_once_with("/defs/pages/a.yaml")
        registry.reload.assert_not_called()

    def test_handler_treats_move_as_discard_and_reload(self):
        """Should forget the old path and load the new one on rename."""
        registry = MagicMock()
        handler = DefinitionChangeHandler(registry)
        handler.dispatch(FileMovedEvent("/defs/pages/a.yaml", "/defs/pages/b.yaml"))
        registry.discard.assert_called_once_with("/defs/pages/a.yaml")
        registry.reload.assert_called_once_with("/defs/pages/b.yaml")

    def test_handler_ignores_other_files_and_directories(self):
        """Should ignore non-YAML files and directory events."""
        registry = MagicMock()
        handler = DefinitionChangeHandler(registry)
        handler.dispatch(FileModifiedEvent("/defs/notes.txt"))
        handler.dispatch(DirCreatedEvent("/defs/pages.yaml"))
        registry.reload.assert_not_called()
        registry.discard.assert_not_called()

    def test_start_and_stop_watching(self, definitions_dir):
        """Should schedule existing paths on a single observer and stop it once."""
        registry = ElementRegistry([str(definitions_dir), str(definitions_dir / "nope")])
        with patch("viewstack.elements.registry.Observer") as observer_cls:
            registry.start_watching()
            registry.start_watching()  # Idempotent
            assert registry.watching
            assert observer_cls.call_count == 1
            observer = observer_cls.return_value
            assert observer.schedule.call_count == 1
            observer.start.assert_called_once()

            registry.stop_watching()
            registry.stop_watching()
            observer.stop.assert_called_once()
            observer.join.assert_called_once()
            assert not registry.watching
