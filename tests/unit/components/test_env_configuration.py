import pytest

from tinify_optimizer.components.configuration.env_configuration import EnvConfiguration


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "development.env").write_text(
        "TINIFY_BASE_URL=https://file.example\n"
        "TINIFY_TIMEOUT_MS=45000\n"
        "VERBOSE=yes\n"
        "BROKEN_INT=abc\n",
        encoding="utf-8",
    )
    return tmp_path


class TestEnvConfiguration:
    def test_reads_file_values(self, config_dir) -> None:
        configuration = EnvConfiguration("development", str(config_dir))

        assert configuration.get_configuration("TINIFY_BASE_URL", str) == "https://file.example"
        assert configuration.get_configuration("TINIFY_TIMEOUT_MS", int) == 45000

    def test_process_environment_takes_precedence(self, config_dir, monkeypatch) -> None:
        monkeypatch.setenv("TINIFY_BASE_URL", "https://env.example")
        configuration = EnvConfiguration("development", str(config_dir))

        assert configuration.get_configuration("TINIFY_BASE_URL", str) == "https://env.example"

    def test_default_used_when_missing(self, config_dir) -> None:
        configuration = EnvConfiguration("development", str(config_dir))

        assert configuration.get_configuration("HTTP_TIMEOUT_SECONDS", float, default=30.0) == 30.0

    def test_missing_without_default_raises(self, config_dir) -> None:
        configuration = EnvConfiguration("development", str(config_dir))

        with pytest.raises(ValueError):
            configuration.get_configuration("NOT_SET_ANYWHERE_KEY", str)

    def test_bool_values(self, config_dir) -> None:
        configuration = EnvConfiguration("development", str(config_dir))

        assert configuration.get_configuration("VERBOSE", bool) is True

    def test_uncastable_value_raises(self, config_dir) -> None:
        configuration = EnvConfiguration("development", str(config_dir))

        with pytest.raises(ValueError) as exc_info:
            configuration.get_configuration("BROKEN_INT", int)

        assert "BROKEN_INT" in str(exc_info.value)

    def test_missing_file_uses_environment_only(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        configuration = EnvConfiguration("staging", str(tmp_path))

        assert configuration.get_configuration("LOG_LEVEL", str) == "DEBUG"
