from src.infrastructure.cache.content_addressed_cache import ContentAddressedCache

__all__ = ["ContentAddressedCache"]
