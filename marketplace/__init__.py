"""Marketplace engagement and promotion backend."""
