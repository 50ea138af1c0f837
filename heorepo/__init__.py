"""HEORepo: local-first catalog of curated HEOR links."""
