"""
Extractors for WordPress backups.

This subpackage turns a WordPress backup into typed records: the ``.wpress``
archive reader pulls ``database.sql`` out of All-in-One WP Migration files,
the column mapping converts tokenized dump rows into records, and the
relations helpers join posts with their categories, tags and featured
images.
"""
