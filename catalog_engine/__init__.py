"""Catalog consistency engine.

Multi-tenant product catalog service: attributes and terms, category
trees, simple and variable products, and per-country stock.
"""
