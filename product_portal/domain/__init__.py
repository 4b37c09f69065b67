"""
Domain package for the Product Portal.

Holds the product record as returned by the gateway and the request/response
schemas used by the web layer.
"""
