"""Security tests for the clearance portal

This module contains security-focused tests including:
- Authentication bypass attempts
- Student isolation (no access to other students' records)
- Privilege escalation to administrator actions
"""
