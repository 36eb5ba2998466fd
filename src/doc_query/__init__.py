"""
doc_query - Embedded document query/update interpreter

Evaluates MongoDB-style filter, sort, pagination and update documents
against an in-process record store under a scoped write transaction.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
