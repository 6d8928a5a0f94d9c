"""Agora discussion service."""
