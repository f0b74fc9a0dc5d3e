"""Adapters from third-party Polymarket clients to the kit protocols."""
