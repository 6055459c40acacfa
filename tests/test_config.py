"""Tests for contrast_checker.core.config: .env loading, walk-up logic and parameters."""

from pathlib import Path

import pytest
from contrast_checker.core.color import COLOR_SECURE_WINDOW_CENSOR
from contrast_checker.core.config import (
    CheckParameters,
    ConfigError,
    find_dotenv,
    load_parameters,
    parameters_from_settings,
    read_dotenv,
    read_settings,
)


class TestReadDotenv:
    def test_simple_key_value(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('FOO=bar\n')
        assert read_dotenv(f) == {'FOO': 'bar'}

    def test_quoted_values(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('KEY="hello world"\nKEY2=\'single\'\n')
        assert read_dotenv(f) == {'KEY': 'hello world', 'KEY2': 'single'}

    def test_comments_and_blank_lines_ignored(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('# comment\n\nFOO=bar\n\n')
        assert read_dotenv(f) == {'FOO': 'bar'}

    def test_no_value(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('NOEQUALS\nFOO=bar\n')
        assert read_dotenv(f) == {'FOO': 'bar'}

    def test_export_prefix(self, tmp_path: Path) -> None:
        f = tmp_path / '.env'
        f.write_text('export CONTRAST_CUSTOM_RATIO=7\n')
        assert read_dotenv(f) == {'CONTRAST_CUSTOM_RATIO': '7'}


class TestFindDotenv:
    def test_finds_in_cwd(self, tmp_path: Path) -> None:
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert find_dotenv(tmp_path) == dotenv.resolve()

    def test_finds_in_parent(self, tmp_path: Path) -> None:
        subdir = tmp_path / 'sub'
        subdir.mkdir()
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert find_dotenv(subdir) == dotenv.resolve()

    def test_stops_at_git_dir(self, tmp_path: Path) -> None:
        # .env is above .git, so it is out of reach
        parent = tmp_path / 'repo'
        parent.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (parent / '.git').mkdir()
        subdir = parent / 'src'
        subdir.mkdir()
        assert find_dotenv(subdir) is None

    def test_stops_at_git_file(self, tmp_path: Path) -> None:
        # .git as a file (worktree)
        parent = tmp_path / 'repo'
        parent.mkdir()
        (tmp_path / '.env').write_text('X=1\n')
        (parent / '.git').write_text('gitdir: ../somewhere\n')
        subdir = parent / 'src'
        subdir.mkdir()
        assert find_dotenv(subdir) is None

    def test_env_at_git_root_found(self, tmp_path: Path) -> None:
        (tmp_path / '.git').mkdir()
        dotenv = tmp_path / '.env'
        dotenv.write_text('X=1\n')
        assert find_dotenv(tmp_path) == dotenv.resolve()


class TestReadSettings:
    def test_explicit_file(self, tmp_path: Path) -> None:
        f = tmp_path / 'custom.env'
        f.write_text('CONTRAST_CUSTOM_RATIO=7\nOTHER=1\n')
        assert read_settings(str(f), environ={}) == {'CONTRAST_CUSTOM_RATIO': '7'}

    def test_environment_wins(self, tmp_path: Path) -> None:
        f = tmp_path / 'custom.env'
        f.write_text('CONTRAST_CUSTOM_RATIO=7\n')
        settings = read_settings(str(f), environ={'CONTRAST_CUSTOM_RATIO': '3'})
        assert settings == {'CONTRAST_CUSTOM_RATIO': '3'}

    def test_missing_explicit_file_ignored(self, tmp_path: Path) -> None:
        settings = read_settings(str(tmp_path / 'nope.env'), environ={'CONTRAST_LOG_LEVEL': 'DEBUG'})
        assert settings == {'CONTRAST_LOG_LEVEL': 'DEBUG'}

    def test_walks_up_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / '.git').mkdir()
        (tmp_path / '.env').write_text('CONTRAST_ENHANCED_EVALUATION=yes\n')
        sub = tmp_path / 'screens'
        sub.mkdir()
        monkeypatch.chdir(sub)
        assert read_settings(environ={}) == {'CONTRAST_ENHANCED_EVALUATION': 'yes'}

    def test_reads_os_environ(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / '.git').mkdir()
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv('CONTRAST_SAVE_VIEW_IMAGES', '1')
        assert read_settings()['CONTRAST_SAVE_VIEW_IMAGES'] == '1'


class TestParameters:
    def test_defaults(self):
        params = parameters_from_settings({})
        assert params == CheckParameters()
        assert params.redaction_color == COLOR_SECURE_WINDOW_CENSOR

    def test_all_values(self):
        params = parameters_from_settings(
            {
                'CONTRAST_CUSTOM_RATIO': '7',
                'CONTRAST_SAVE_VIEW_IMAGES': 'true',
                'CONTRAST_ENHANCED_EVALUATION': 'On',
                'CONTRAST_REDACTION_COLOR': '#333333',
            }
        )
        assert params == CheckParameters(
            custom_contrast_ratio=7.0,
            save_view_images=True,
            enhanced_contrast_evaluation=True,
            redaction_color=0xFF333333,
        )

    def test_redaction_none(self):
        assert parameters_from_settings({'CONTRAST_REDACTION_COLOR': 'none'}).redaction_color is None

    def test_bad_ratio(self):
        with pytest.raises(ConfigError, match='CUSTOM_RATIO'):
            parameters_from_settings({'CONTRAST_CUSTOM_RATIO': 'high'})

    def test_ratio_below_one(self):
        with pytest.raises(ConfigError):
            parameters_from_settings({'CONTRAST_CUSTOM_RATIO': '0.5'})

    def test_bad_bool(self):
        with pytest.raises(ConfigError, match='SAVE_VIEW_IMAGES'):
            parameters_from_settings({'CONTRAST_SAVE_VIEW_IMAGES': 'maybe'})

    def test_bad_colour(self):
        with pytest.raises(ConfigError, match='REDACTION_COLOR'):
            parameters_from_settings({'CONTRAST_REDACTION_COLOR': 'black'})

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)

    def test_load_parameters(self, tmp_path: Path) -> None:
        f = tmp_path / 'custom.env'
        f.write_text('CONTRAST_CUSTOM_RATIO=4.5\n')
        assert load_parameters(str(f), environ={}).custom_contrast_ratio == 4.5
