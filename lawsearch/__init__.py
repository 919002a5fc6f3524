"""
Top-level package for the law library resource recommender.

Modules here load the library's resource catalogs, build a merged
lookup index, shortlist candidates for an external AI recommender,
validate and score its suggestions, score local guides and assets
lexically, and merge everything into a short ranked result list.
There are no side-effects on import; the catalog index is built by an
explicit call to :func:`lawsearch.pipeline.build_context`.
"""
from __future__ import annotations
