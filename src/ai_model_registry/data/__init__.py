"""Bundled data package for AI Model Registry.

This package ships the default snapshot (models.json) and alias table
(aliases.yaml). It is not intended for direct import by users.
"""
