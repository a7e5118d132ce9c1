"""Platform actions."""

from .share import share_text

__all__ = ["share_text"]
