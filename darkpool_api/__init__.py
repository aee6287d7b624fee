"""
darkpool_api -- thin HTTP surface over intake and the read-only selectors.

The API never touches batch internals; the only write path is POST /submit.
"""

from darkpool_api.app import create_app

__all__ = ["create_app"]
