"""Schema-driven faceted search for Django catalogs."""
