"""
TokenGate API Routes
"""

from tokengate.api.routes import content, networks

__all__ = ["content", "networks"]
