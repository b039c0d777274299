"""FastAPI application exposing the SSLCommerz bridge.

Endpoints:
- POST /api/payments/sslcommerz/landing (success landing request)
- POST /api/webhooks/sslcommerz (IPN)
- POST /api/payments/sslcommerz/checkout (payment session)
"""
