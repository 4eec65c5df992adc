import fsspec  # type: ignore
from fsspec import AbstractFileSystem  # type: ignore


def get_fs(path: str) -> AbstractFileSystem:
    """
    Get an fsspec filesystem object for the given path.

    Supports various filesystem types including local, S3, GCS, and others
    via the fsspec library.

    :param path: Path to the file, can include filesystem prefix
        (e.g., "s3://bucket/file" or "/local/path").

    :return: AbstractFileSystem instance appropriate for the given path.

    """
    if path.find("://") >= 0:
        file_system = path.split("://")[0]
        fs = fsspec.filesystem(file_system)  # type: ignore
    else:
        fs = fsspec.filesystem("local")  # type: ignore
    return fs  # type: ignore


def asset_file_path(asset_prefix: str, filename: str) -> str:
    """
    Build the full path of an asset file.

    :param asset_prefix: the common prefix (directory or URL) of the asset files
    :param filename: the file name relative to the prefix

    :return: the joined path, or the file name itself if the prefix is empty
    """
    if not asset_prefix:
        return filename
    return f"{asset_prefix.rstrip('/')}/{filename.lstrip('/')}"


def read_asset_file(asset_prefix: str, filename: str) -> bytes:
    """Read the content of an asset file."""
    path = asset_file_path(asset_prefix, filename)
    fs = get_fs(path)
    with fs.open(path, "rb") as f:  # type: ignore
        return f.read()  # type: ignore


def write_asset_file(asset_prefix: str, filename: str, content: bytes) -> None:
    """Overwrite the content of an asset file."""
    path = asset_file_path(asset_prefix, filename)
    fs = get_fs(path)
    with fs.open(path, "wb") as f:  # type: ignore
        f.write(content)  # type: ignore
