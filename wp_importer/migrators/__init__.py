"""
Writers for the portal side of the import.

This subpackage holds the DuckDB-backed :class:`PortalStore` used to create
users, categories, tags and posts, and the media helper that copies
featured images from the old WordPress host into the portal's uploads.
"""
