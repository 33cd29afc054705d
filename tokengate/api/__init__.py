"""
TokenGate API

FastAPI surface for creating gated content and requesting access.
"""
