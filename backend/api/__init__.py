"""
Adminboard API package.

Provides the FastAPI application: the auth and authorization dependency
chain, rate limiting, activity logging and error envelopes. The
application itself lives in api.app.
"""
