import hashlib
from pathlib import Path
from typing import Union

CHUNK_SIZE = 65536


def hash_bytes(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_file(file_path: Union[str, Path], chunk_size: int = CHUNK_SIZE) -> str:
    """Return the SHA-256 hex digest of a file's content.

    The file is streamed in chunks; the digest equals ``hash_bytes`` of the
    whole content.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks to read.

    Returns:
        Hexadecimal digest string.

    Raises:
        OSError: If the file cannot be read.
    """
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            data = f.read(chunk_size)
            if not data:
                break
            sha256.update(data)
    return sha256.hexdigest()
