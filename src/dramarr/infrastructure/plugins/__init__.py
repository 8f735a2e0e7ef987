from .httpx_base import HttpxPluginBase

__all__ = ["HttpxPluginBase"]
