"""
Capstone Portal
Students apply to faculty for capstone projects; faculty accept within intake limits.

Architecture:
- MongoDB: profiles, applications, reference lists
- Identity provider: sign-in (this service only verifies its tokens)
- Admission policy engine: pure rules, no I/O
"""

__version__ = "1.0.0"
