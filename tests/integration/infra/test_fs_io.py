from __future__ import annotations

"""
Integration tests for FileSystem Infrastructure.

Validates cross-platform resolution of the per-user data directory that
holds config.json and the diagnostic log.
"""

import os
from pathlib import Path
from unittest.mock import patch

from repometa.infra.fs import get_user_data_dir
from repometa.infra.logging import get_default_log_path

# -----------------------------------------------------------------------------
# PATH RESOLUTION TESTS
# -----------------------------------------------------------------------------

def test_get_user_data_dir_windows() -> None:
    """Verify resolution of %LOCALAPPDATA% on Windows systems."""
    mock_appdata = "C:/Users/Test/AppData/Local"
    with patch("os.name", "nt"):
        with patch.dict(os.environ, {"LOCALAPPDATA": mock_appdata}):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                assert "RepoMeta" in path
                assert path.lower().startswith(os.path.abspath(mock_appdata).lower())


def test_get_user_data_dir_unix() -> None:
    """Verify resolution of ~/.repometa on Unix-like systems."""
    mock_home = "/home/testuser"
    with patch("os.name", "posix"):
        with patch("os.path.expanduser", return_value=mock_home):
            with patch("os.makedirs"):
                path = get_user_data_dir()
                normalized_path = path.replace("\\", "/")
                assert normalized_path.endswith("/home/testuser/.repometa")


def test_get_user_data_dir_creates_directory(tmp_path: Path) -> None:
    with patch("os.name", "posix"):
        with patch("os.path.expanduser", return_value=str(tmp_path)):
            path = get_user_data_dir()
    assert os.path.isdir(path)


def test_default_log_path_inside_data_dir(tmp_path: Path) -> None:
    with patch("repometa.infra.logging.core.get_user_data_dir", return_value=str(tmp_path)):
        path = get_default_log_path()
    assert path == os.path.join(str(tmp_path), "logs", "repometa.log")
