"""
Data Models
===========

Pydantic data models for request/response validation and internal data structures.

Models:
- schemas: NLUI documents, stored instances, decoded events and API responses
"""
