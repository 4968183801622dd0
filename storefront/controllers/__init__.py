"""Request controllers for the storefront API."""
