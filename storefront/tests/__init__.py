"""End-to-end tests for the storefront API."""
