from .runtime_info import RuntimeInfo


__all__ = ["RuntimeInfo"]
