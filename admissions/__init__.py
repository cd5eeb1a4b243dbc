"""
College Admissions Marketplace
Students shortlist colleges, colleges maintain profiles and course catalogs,
admins forward finalized students to colleges.

Architecture:
- MongoDB: every entity (accounts, college profiles, shortlists)
- FastAPI: REST API under /api
- Local disk: college media uploads, served under /uploads
"""

__version__ = "1.0.0"
