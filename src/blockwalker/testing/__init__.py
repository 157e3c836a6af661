# src/blockwalker/testing/__init__.py
"""Fakes and helpers for BlockWalker tests."""
