"""
Placement Cell Portal
Coordination backend for a university placement cell.

Architecture:
- PostgreSQL: Structured data (accounts, companies, drives, requests, tasks, emails)
- MongoDB: Registration form documents (raw text and AI extractions)
- DeepSeek AI: Form field extraction and email drafting only
"""

__version__ = "1.0.0"
