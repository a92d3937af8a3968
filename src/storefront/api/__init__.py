from .client import ApiClient, clean_params

__all__ = ["ApiClient", "clean_params"]
