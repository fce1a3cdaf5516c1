"""Core domain package for telerelay.

Core contains filtering, pairing, batching and dispatch logic without any
Telegram or storage-specific code, keeping the relay engine portable.
"""
