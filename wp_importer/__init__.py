"""
Top-level package for the WordPress → portal import utility.

This package bundles all components required to read a WordPress SQL dump
(or the ``.wpress`` backup it ships in), map its rows to typed records, and
write users, categories, tags, posts and featured images to the portal
database.  Modules are split into subpackages:

* :mod:`wp_importer.parsers` – SQL dump tokenizer and HTML content cleanup
* :mod:`wp_importer.extractors` – column mapping, relations and ``.wpress`` archives
* :mod:`wp_importer.migrators` – portal database writes and media download
* :mod:`wp_importer.utils` – JSONL reports, pre-flight checks and redirect CSVs

Each layer has no direct knowledge of configuration or execution strategy;
orchestration is handled in :mod:`wp_importer.migration_tool`.
"""
