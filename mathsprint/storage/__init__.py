from .store import (
    DEFAULT_CAP,
    DEFAULT_KEY,
    BlobStore,
    JsonFileBlobStore,
    MemoryBlobStore,
    RecordStore,
    deserialize_records,
    serialize_records,
)

__all__ = [
    "DEFAULT_CAP",
    "DEFAULT_KEY",
    "BlobStore",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    "RecordStore",
    "deserialize_records",
    "serialize_records",
]
