from pathlib import Path

import fsspec
import pytest

from tests.utils import SlowFileSystem

ASSET_FILES = {
    "a.txt": b"first file",
    "b.json": b'{"second": "file"}',
    "docs/c.md": b"# third file",
}


@pytest.fixture
def asset_dir(tmp_path: Path) -> Path:
    for name, content in ASSET_FILES.items():
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return tmp_path


@pytest.fixture
def slow_fs_prefix() -> str:
    fsspec.register_implementation(
        SlowFileSystem.protocol, SlowFileSystem, clobber=True
    )
    return f"{SlowFileSystem.protocol}://asset"
