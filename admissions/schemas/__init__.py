"""
Schemas module - Request/Response schemas for API endpoints.

Difference from stored documents:
- Documents: snake_case dicts kept in MongoDB (see services)
- Schemas: API contract (what client sends/receives)
"""
