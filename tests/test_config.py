"""Tests for routing configuration loading."""

import pytest

from tdlr.config import CONFIG_ENV_VAR, DEFAULT_CONFIG_NAME, ConfigError, RoutingConfig
from tdlr.routing import ErrorPolicy, TimestampSource


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestFromDict:
    def test_flat(self):
        config = RoutingConfig.from_dict(
            {
                "to": 'if(is_video, "@videos", "me")',
                "include": ["jpg", "mp4"],
                "on_error": "skip",
                "timestamp_source": "created",
            }
        )

        assert config.to == 'if(is_video, "@videos", "me")'
        assert config.include == ("jpg", "mp4")
        assert config.on_error is ErrorPolicy.SKIP
        assert config.timestamp_source is TimestampSource.CREATED

    def test_nested_under_routing(self):
        config = RoutingConfig.from_dict({"routing": {"chat": "@archive"}})

        assert config.chat == "@archive"
        assert config.to is None

    def test_defaults(self):
        config = RoutingConfig.from_dict({})

        assert config == RoutingConfig()
        assert config.on_error is ErrorPolicy.ABORT
        assert config.timestamp_source is TimestampSource.MODIFIED

    def test_comma_separated_extensions(self):
        config = RoutingConfig.from_dict({"exclude": "tmp, log,"})

        assert config.exclude == ("tmp", "log")

    def test_enum_values_are_case_insensitive(self):
        assert RoutingConfig.from_dict({"on_error": "SKIP"}).on_error is ErrorPolicy.SKIP

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown key"):
            RoutingConfig.from_dict({"destination": "@a"})

    def test_to_and_chat_are_exclusive(self):
        with pytest.raises(ConfigError, match="mutually exclusive"):
            RoutingConfig.from_dict({"to": '"@a"', "chat": "@b"})

    def test_bad_enum_value(self):
        with pytest.raises(ConfigError, match="abort, skip"):
            RoutingConfig.from_dict({"on_error": "retry"})

    def test_bad_extension_list(self):
        with pytest.raises(ConfigError):
            RoutingConfig.from_dict({"include": 5})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(ConfigError):
            RoutingConfig.from_dict(["to"])


class TestLoad:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("chat: '@custom'\n")

        assert RoutingConfig.load(path).chat == "@custom"

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("chat: '@from_env'\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert RoutingConfig.load(cwd=tmp_path).chat == "@from_env"

    def test_default_file_in_cwd(self, tmp_path):
        (tmp_path / DEFAULT_CONFIG_NAME).write_text(
            "routing:\n  to: 'if(is_image, \"@photos\", \"me\")'\n"
        )

        assert RoutingConfig.load(cwd=tmp_path).to == 'if(is_image, "@photos", "me")'

    def test_falls_back_to_defaults(self, tmp_path):
        assert RoutingConfig.load(cwd=tmp_path) == RoutingConfig()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert RoutingConfig.load(path) == RoutingConfig()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("to: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            RoutingConfig.load(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Cannot read config"):
            RoutingConfig.load(tmp_path / "missing.yaml")


class TestMerge:
    def test_none_keeps_file_value(self):
        config = RoutingConfig(include=("jpg",)).merge(include=None, on_error=None)

        assert config.include == ("jpg",)
        assert config.on_error is ErrorPolicy.ABORT

    def test_to_replaces_chat(self):
        config = RoutingConfig(chat="@a").merge(to='"@b"')

        assert config.to == '"@b"'
        assert config.chat is None

    def test_chat_replaces_to(self):
        config = RoutingConfig(to='"@a"').merge(chat="@b")

        assert config.chat == "@b"
        assert config.to is None
