"""Lux Gold catalog backend.

Storefront and admin HTTP API for a jewelry catalog, with CSRF protection
on state-changing requests and retries for transient database failures.
"""

__version__ = "0.1.0"
