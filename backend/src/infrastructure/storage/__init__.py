from .storage_config import build_blob_store, load_storage_config, StorageConfig

__all__ = ["build_blob_store", "load_storage_config", "StorageConfig"]
