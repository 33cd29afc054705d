"""
TokenGate - Token-Gated Content Service

Stores one piece of content per token contract and reveals it only to
accounts that hold a positive balance of that token.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
