"""
Database Package - Database management and operations
Contains database initialization, connections, and data access layers
"""

# Keep initializer lightweight; import concrete modules directly at call sites.
__all__: list[str] = []
