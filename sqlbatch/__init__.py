"""
sqlbatch – run batches of SQL scripts against one or more databases.
"""
__version__ = "0.4.0"
