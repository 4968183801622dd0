"""Tests for :mod:`storefront.auth`."""
