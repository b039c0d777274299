"""Utility helpers for the SSLCommerz bridge."""
