"""
Catalog package for the resource directory API.

This package turns the hosted record store's ``resources`` collection
into browsable catalogue views: ``store`` fetches and normalises
approved resources (falling back to a built-in set when the store is
unreachable) and handles submissions, ``view_model`` filters, sorts and
counts them, ``directories`` manages category groupings and ``session``
carries the signed-in user. ``router`` exposes all of it over HTTP.
"""

from .router import router as catalog_router  # noqa: F401
