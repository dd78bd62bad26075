"""
Unit tests for the command line front end.
"""

import pytest

from staticserver import __version__
from staticserver.__main__ import build_configs, build_parser, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_WORKERS", "HTTP_LOG_LEVEL",
                 "HTTP_LOG_FORMAT", "STATIC_ROOT", "STATIC_CACHE", "STATIC_GZIP",
                 "STATIC_AUTOINDEX", "STATIC_BASE_DIR", "STATIC_DEFAULT_EXT",
                 "STATIC_SHOW_DIR"):
        monkeypatch.delenv(name, raising=False)


def configs_for(*argv):
    return build_configs(build_parser().parse_args(list(argv)))


class TestBuildConfigs:
    def test_positional_directory(self, site):
        config, options = configs_for(str(site))

        assert options.root == str(site.resolve())
        assert config.port == 8000

    def test_root_flag_wins(self, site, tmp_path):
        _, options = configs_for(str(tmp_path), "--root", str(site))
        assert options.root == str(site.resolve())

    def test_defaults_to_cwd(self, site, monkeypatch):
        monkeypatch.chdir(site)
        _, options = configs_for()
        assert options.root == str(site.resolve())

    def test_network_flags(self, site):
        config, _ = configs_for(str(site), "-H", "0.0.0.0", "-p", "3000", "-w", "2")

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.min_workers == 2
        assert config.max_workers == 8

    def test_static_flags(self, site):
        _, options = configs_for(
            str(site), "--cache", "60", "--gzip", "--show-dir",
            "--no-autoindex", "--base-dir", "/static/",
        )

        assert options.cache == 60
        assert options.gzip is True
        assert options.show_dir is True
        assert options.auto_index is False
        assert options.base_dir == "/static"

    def test_default_ext_without_value(self, site):
        _, options = configs_for(str(site), "--default-ext")
        assert options.default_ext == "html"

    def test_default_ext_with_value(self, site):
        _, options = configs_for(str(site), "--default-ext", ".htm")
        assert options.default_ext == "htm"

    def test_environment_used_when_flag_unset(self, site, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "9001")
        monkeypatch.setenv("STATIC_GZIP", "1")

        config, options = configs_for(str(site))

        assert config.port == 9001
        assert options.gzip is True

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ValueError):
            configs_for(str(tmp_path / "missing"))


class TestMain:
    def test_missing_directory_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "missing")])

        assert exc_info.value.code == 2
        assert "does not exist" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            main(["--version"])

        assert __version__ in capsys.readouterr().out
