"""Service modules: persistence, credentials, catalog and mail."""
