from .token_store import FileTokenStore, MemoryTokenStore, TokenStore

__all__ = ["FileTokenStore", "MemoryTokenStore", "TokenStore"]
