"""Tests for :mod:`storefront.services`."""
