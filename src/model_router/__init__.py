"""Resolve logical chat-model names to provider-specific HTTP requests."""
