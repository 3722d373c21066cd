"""Typed records: WordPress rows on the way in, portal posts on the way out."""
