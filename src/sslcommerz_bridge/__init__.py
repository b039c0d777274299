"""SSLCommerz payment bridge for Tutor LMS orders."""

__version__ = "0.1.0"
