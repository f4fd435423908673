"""Platform integrations: one sub-package per streaming platform.

Each sub-package provides a ``config`` module (API constants), a ``client``
module (thin async HTTP wrapper) and a ``discovery`` module (the collection
pass that drives the client and the writer).
"""
