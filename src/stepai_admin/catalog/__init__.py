"""Catalog REST resources: the envelope client, categories, trend sections and setup."""
