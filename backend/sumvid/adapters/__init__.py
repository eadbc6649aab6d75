"""Adapters: concrete implementations of core protocols."""
