import pathlib

import pytest

from fluxreporter.config import Config, expand_env
from fluxreporter.errors import ConfigError
from fluxreporter.models import Origin

CONFIG_YAML = """
email: user@example.com
password: secret
origins:
  - id: 1
    project: A
    endpoint: a1.imageflux.jp
  - id: 2
    project: B
"""


def _write(tmp_path: "pathlib.Path", text: "str") -> "str":
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: "pytest.MonkeyPatch") -> "None":
    monkeypatch.delenv("IMAGEFLUX_EMAIL", raising=False)
    monkeypatch.delenv("IMAGEFLUX_PASSWORD", raising=False)


class TestConfigFromFile:
    def test_loads_origins_in_order(self, tmp_path: "pathlib.Path") -> "None":
        config = Config.from_file(_write(tmp_path, CONFIG_YAML))

        assert config.email == "user@example.com"
        assert config.password == "secret"
        assert config.origins == [
            Origin(id=1, project="A", endpoint="a1.imageflux.jp"),
            Origin(id=2, project="B", endpoint=""),
        ]

    def test_password_is_not_in_repr(self, tmp_path: "pathlib.Path") -> "None":
        config = Config.from_file(_write(tmp_path, CONFIG_YAML))
        assert "secret" not in repr(config)

    def test_env_overrides_file(
        self,
        tmp_path: "pathlib.Path",
        monkeypatch: "pytest.MonkeyPatch",
    ) -> "None":
        monkeypatch.setenv("IMAGEFLUX_EMAIL", "env@example.com")
        monkeypatch.setenv("IMAGEFLUX_PASSWORD", "from-env")

        config = Config.from_file(_write(tmp_path, CONFIG_YAML))

        assert config.email == "env@example.com"
        assert config.password == "from-env"

    def test_expands_env_templates(
        self,
        tmp_path: "pathlib.Path",
        monkeypatch: "pytest.MonkeyPatch",
    ) -> "None":
        monkeypatch.delenv("FLUX_TEST_EMAIL", raising=False)
        monkeypatch.setenv("FLUX_TEST_PASSWORD", "templated")
        text = (
            'email: \'{{ env "FLUX_TEST_EMAIL" "fallback@example.com" }}\'\n'
            'password: \'{{ must_env "FLUX_TEST_PASSWORD" }}\'\n'
            "origins: []\n"
        )

        config = Config.from_file(_write(tmp_path, text))

        assert config.email == "fallback@example.com"
        assert config.password == "templated"
        assert config.origins == []

    def test_missing_file_raises(self, tmp_path: "pathlib.Path") -> "None":
        with pytest.raises(ConfigError):
            Config.from_file(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml_raises(self, tmp_path: "pathlib.Path") -> "None":
        with pytest.raises(ConfigError):
            Config.from_file(_write(tmp_path, "email: [unclosed\n"))

    def test_top_level_must_be_mapping(self, tmp_path: "pathlib.Path") -> "None":
        with pytest.raises(ConfigError):
            Config.from_file(_write(tmp_path, "- a\n- b\n"))

    def test_missing_credentials_raise(self, tmp_path: "pathlib.Path") -> "None":
        with pytest.raises(ConfigError, match="password"):
            Config.from_file(_write(tmp_path, "email: user@example.com\n"))

    @pytest.mark.parametrize(
        "origins",
        [
            "origins: {id: 1}",
            "origins:\n  - project: A",
            "origins:\n  - id: one\n    project: A",
            "origins:\n  - id: 1",
            "origins:\n  - 1",
        ],
    )
    def test_malformed_origins_raise(
        self, tmp_path: "pathlib.Path", origins: "str"
    ) -> "None":
        text = f"email: user@example.com\npassword: secret\n{origins}\n"
        with pytest.raises(ConfigError):
            Config.from_file(_write(tmp_path, text))


class TestExpandEnv:
    def test_unset_env_becomes_empty(self, monkeypatch: "pytest.MonkeyPatch") -> "None":
        monkeypatch.delenv("FLUX_TEST_UNSET", raising=False)
        assert expand_env('a: "{{ env "FLUX_TEST_UNSET" }}"') == 'a: ""'

    def test_must_env_unset_raises(self, monkeypatch: "pytest.MonkeyPatch") -> "None":
        monkeypatch.delenv("FLUX_TEST_UNSET", raising=False)
        with pytest.raises(ConfigError) as exc_info:
            expand_env('{{ must_env "FLUX_TEST_UNSET" }}')
        assert exc_info.value.details == {"env": "FLUX_TEST_UNSET"}

    def test_set_env_wins_over_default(
        self, monkeypatch: "pytest.MonkeyPatch"
    ) -> "None":
        monkeypatch.setenv("FLUX_TEST_SET", "value")
        assert expand_env('{{ env "FLUX_TEST_SET" "default" }}') == "value"

    def test_plain_text_untouched(self) -> "None":
        assert expand_env("email: user@example.com") == "email: user@example.com"
