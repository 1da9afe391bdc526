"""Core domain package for telebind.

Core contains handler registration, dispatch, permission gating and
scheduling without any Telegram-specific code, keeping the engine portable.
"""
