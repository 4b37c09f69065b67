"""
Product Portal - list, view and edit products through the API gateway.

Requests are proxied to a remote OData service; every outbound call carries
the gateway's authorization, subscription key and trace headers.
"""

__version__ = "0.1.0"
