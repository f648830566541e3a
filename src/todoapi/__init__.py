"""
Todo API package.

A small FastAPI service that creates todo records behind an HMAC bearer-token
gate. Build the application with `todoapi.main.create_app` and run it under
the graceful-shutdown controller with `todoapi.server.main`.
"""

__version__ = "0.1.0"
