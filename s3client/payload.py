import hashlib
from typing import Union

UNSIGNED_PAYLOAD = 'UNSIGNED-PAYLOAD'
EMPTY_SHA256 = hashlib.sha256(b'').hexdigest()

CHUNK_SIZE = 64 * 1024


class InMemoryBody:
    """Request body held in memory, hashed eagerly."""

    def __init__(self, data: Union[bytes, str] = b''):
        if isinstance(data, str):
            data = data.encode('utf-8')
        self.data = data

    def payload_hash(self) -> str:
        return hashlib.sha256(self.data).hexdigest()

    def open(self):
        return self.data

    def __len__(self) -> int:
        return len(self.data)


class StreamedBody:
    """Request body read from a file on disk.

    The file is hashed in chunks so it never has to fit in memory. With
    ``unsigned=True`` no hash is computed and the payload is signed as
    ``UNSIGNED-PAYLOAD`` instead.
    """

    def __init__(self, filename: str, unsigned: bool = False):
        self.filename = filename
        self.unsigned = unsigned

    def payload_hash(self) -> str:
        if self.unsigned:
            return UNSIGNED_PAYLOAD
        sha = hashlib.sha256()
        with open(self.filename, 'rb') as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b''):
                sha.update(chunk)
        return sha.hexdigest()

    def open(self):
        return open(self.filename, 'rb')


def as_body(data) -> Union[InMemoryBody, StreamedBody]:
    if data is None:
        return InMemoryBody()
    if isinstance(data, (InMemoryBody, StreamedBody)):
        return data
    if isinstance(data, (bytes, str)):
        return InMemoryBody(data)
    raise TypeError(f"Unsupported request body type: {type(data).__name__}")
