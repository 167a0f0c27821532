"""
Fugazi Live Series scraper.

This package walks the paginated Fugazi Live Series catalog one page at a
time, extracting each release's fields and track list, and writes one quoted,
comma-separated line per release.
"""
