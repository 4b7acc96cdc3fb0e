from __future__ import annotations

from pathlib import Path

import pytest

from tether import ConfigurationProvider, Environment
from tether.core.errors import ConfigurationReadError, MissingEnvironmentError
from tether.sources.files import FilesConfigurationSource, as_files_provider, resolve_sub_path
from tether.sources.memory import MemoryConfigurationSource


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    (tmp_path / "application.properties").write_text("some.setting=rootValue\nshared=root\n")
    (tmp_path / "otherConfig.properties").write_text("otherConfig.setting=other\nshared=other\n")
    apps = tmp_path / "otherApplicationConfigs"
    apps.mkdir()
    (apps / "application.properties").write_text("some.setting=otherAppSetting\n")
    return tmp_path


def test_memory_source_default_and_named_environments():
    source = MemoryConfigurationSource({"a": "1"}, environments={"prod": {"a": "2"}})
    assert source.get_configuration() == {"a": "1"}
    assert source.get_configuration(Environment("prod")) == {"a": "2"}
    with pytest.raises(MissingEnvironmentError):
        source.get_configuration(Environment("qa"))


def test_memory_source_snapshots_are_independent():
    source = MemoryConfigurationSource({"a": "1"})
    before = source.get_configuration()
    source.update({"a": "2"})
    assert before["a"] == "1"
    assert source.get_configuration()["a"] == "2"


def test_files_source_default_environment(config_dir: Path):
    source = FilesConfigurationSource(config_dir)
    assert source.get_configuration()["some.setting"] == "rootValue"


def test_files_source_environment_sub_directory(config_dir: Path):
    source = FilesConfigurationSource(config_dir)
    snapshot = source.get_configuration(Environment("/otherApplicationConfigs/"))
    assert snapshot == {"some.setting": "otherAppSetting"}


def test_files_source_merges_files_in_order(config_dir: Path):
    source = FilesConfigurationSource(
        config_dir, config_files=["application.properties", "otherConfig.properties"]
    )
    snapshot = source.get_configuration()
    assert snapshot["some.setting"] == "rootValue"
    assert snapshot["otherConfig.setting"] == "other"
    assert snapshot["shared"] == "other"


def test_files_source_missing_environment(config_dir: Path):
    source = FilesConfigurationSource(config_dir)
    with pytest.raises(MissingEnvironmentError):
        source.get_configuration(Environment("nope"))


def test_files_source_missing_file(config_dir: Path):
    source = FilesConfigurationSource(config_dir, config_files=["missing.properties"])
    with pytest.raises(ConfigurationReadError) as exc_info:
        source.get_configuration()
    assert not isinstance(exc_info.value, MissingEnvironmentError)


def test_files_source_picks_up_changes_through_provider(config_dir: Path):
    provider = ConfigurationProvider(FilesConfigurationSource(config_dir))
    assert provider.get("some.setting") == "rootValue"
    (config_dir / "application.properties").write_text("some.setting=changed\n")
    assert provider.get("some.setting") == "changed"


def test_files_provider_accepts_callable_and_list():
    assert as_files_provider(None)() == [Path("application.properties")]
    assert as_files_provider(["a.properties", "b/c.properties"])() == [
        Path("a.properties"),
        Path("b/c.properties"),
    ]

    def provider():
        return [Path("x.properties")]

    assert as_files_provider(provider) is provider


def test_resolve_sub_path_rejects_escape(tmp_path: Path):
    assert resolve_sub_path(tmp_path, "/a/b/") == tmp_path / "a" / "b"
    assert resolve_sub_path(tmp_path, "") == tmp_path
    with pytest.raises(ConfigurationReadError):
        resolve_sub_path(tmp_path, "../outside")
