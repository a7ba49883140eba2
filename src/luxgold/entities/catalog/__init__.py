"""Catalog entities: categories, products, attributes and variations."""
