"""
Storage Module

Persistence collaborators the scheduling engine loads from and syncs to:
- Store interface and in-memory store (base.py)
- Frappe DocType-backed store (frappe_store.py)
"""
