"""Federated login: provider code exchange, local user provisioning and session tokens."""
