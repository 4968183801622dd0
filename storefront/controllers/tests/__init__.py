"""Tests for :mod:`storefront.controllers`."""
