"""Core domain package for hashbridge.

Core contains matching, routing, dispatch and polling logic without any
Telegram, Notion or storage-specific code, keeping the business logic portable.
"""
