"""
Request-level dependencies: authentication, role guards, rate limiting
and activity logging.
"""
