"""Tests for building containers from settings."""

import logging

import pytest

from larder import (
    ConfigurationFileNotFoundError,
    Container,
    ContainerSettings,
    LifecycleState,
    build_container,
    configure_logging,
)


@pytest.fixture
def app_dir(tmp_path):
    """Directory with a schema, a Python and a YAML configuration file."""
    (tmp_path / "schema.yaml").write_text(
        "components:\n"
        "  greeting: string\n"
        "  port: int\n"
        "  items: string[]\n"
    )
    (tmp_path / "app.py").write_text(
        'container.set("greeting", "hi")\n'
        'container.register("port", lambda: 8080)\n'
    )
    (tmp_path / "values.yaml").write_text("items: [a, b]\n")
    return tmp_path


@pytest.fixture
def settings(app_dir):
    return ContainerSettings(
        root_path=str(app_dir),
        schema_path="schema.yaml",
        config_files=["app.py", "values.yaml"],
    )


class AppContainer(Container):
    verbose: bool

    def init(self):
        self.set("verbose", False)


class TestBuildContainer:
    """Tests for build_container()."""

    def test_build_and_seal(self, settings):
        """Test schema components are configured and the container is sealed."""
        container = build_container(settings)

        assert container.state is LifecycleState.SEALED
        assert container.get("greeting") == "hi"
        assert container.get("port") == 8080
        assert container.get("items") == ["a", "b"]

    def test_unsealed(self, settings):
        settings.seal = False

        container = build_container(settings)

        assert container.state is LifecycleState.OPEN
        assert container.is_registered("port")
        assert not container.is_realized("port")

    def test_invalid_settings(self, tmp_path):
        settings = ContainerSettings(root_path=str(tmp_path), schema_path="missing.yaml")

        with pytest.raises(ValueError, match="Configuration errors"):
            build_container(settings)

    def test_missing_config_file(self, app_dir):
        settings = ContainerSettings(root_path=str(app_dir), config_files=["nope.py"])

        with pytest.raises(ConfigurationFileNotFoundError):
            build_container(settings)

    def test_container_class_with_schema(self, settings):
        """Test class annotations are combined with schema declarations."""
        container = build_container(settings, container_class=AppContainer)

        assert isinstance(container, AppContainer)
        assert container.names() == ["verbose", "greeting", "port", "items"]
        assert container.get("verbose") is False

    def test_root_path_passed_to_container(self, settings, app_dir):
        container = build_container(settings)

        assert container.root_path == app_dir


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_debug_level(self):
        configure_logging(debug=True)

        assert logging.getLogger("larder").level == logging.DEBUG

        configure_logging(debug=False)

        assert logging.getLogger("larder").level == logging.INFO

    def test_single_handler(self):
        configure_logging()
        configure_logging()

        handlers = [h for h in logging.getLogger("larder").handlers if isinstance(h, logging.StreamHandler)]
        assert len(handlers) == 1
