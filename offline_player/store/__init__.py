"""Durable local blob store for attached audio files."""

from offline_player.store.blobstore import BlobStore, LocalFileRecord, StoredFileInfo, guess_mime
from offline_player.store.models import StoreBase, StoredFile
from offline_player.store.session import STORE_DB_NAME, get_default_store_path

__all__ = [
    "BlobStore",
    "LocalFileRecord",
    "STORE_DB_NAME",
    "StoreBase",
    "StoredFile",
    "StoredFileInfo",
    "get_default_store_path",
    "guess_mime",
]
