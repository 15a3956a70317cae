"""Vendor export layouts."""
