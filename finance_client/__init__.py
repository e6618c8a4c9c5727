"""
Finance Client - Reconciliation Layer

Client-side state for a personal-finance app whose numbers are all
computed by a remote server.

DESIGN PRINCIPLES:
1. The latest server response is authoritative
2. Writes never touch local state; a refresh signal reloads instead
3. Validate before sending, surface every failure
4. Pure transforms for everything that can be pure
"""

__version__ = "1.0.0"
__author__ = "Finance Client Team"
