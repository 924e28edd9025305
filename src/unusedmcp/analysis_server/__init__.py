"""Analysis server - unused exports and circular imports."""
