"""HTTP surface of the Product Portal: routers, dependencies and error handlers."""
