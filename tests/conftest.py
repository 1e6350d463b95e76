from pathlib import Path

import pytest


@pytest.fixture
def symlinks_supported(tmp_path: Path) -> bool:
    try:
        (tmp_path / ".link-probe").symlink_to(tmp_path)
    except (OSError, NotImplementedError):
        return False
    (tmp_path / ".link-probe").unlink()
    return True
