"""Telegram (Telethon) adapters for the telebind core ports."""
