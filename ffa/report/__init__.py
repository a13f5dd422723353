"""League history reports: synchronisation, read views and output formats."""
