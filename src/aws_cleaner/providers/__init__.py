"""Resource-kind providers.

Each provider enumerates the physical ids of one AWS resource kind and deletes
a single id. Providers are wired into cleanup pipelines by
``aws_cleaner.cleanup.registry``.
"""
