from .base import KvFileCacheBaseModel


__all__ = ["KvFileCacheBaseModel"]
