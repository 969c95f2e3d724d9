"""PassVault.

Client-side cryptographic vault: master-password key derivation,
authenticated encryption of secret fields and per-session key custody.
"""
from .version import __version__, __title__, __description__

__all__ = ["__version__", "__title__", "__description__"]
