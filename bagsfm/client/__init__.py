"""HTTP client pieces for the Bags API.

Security notes:
- Treat server responses as untrusted input.
- Avoid printing or logging the API key or raw upload bytes.
"""
