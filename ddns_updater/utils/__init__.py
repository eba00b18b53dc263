"""
Utility functions and helpers.

This package contains input validation and configuration loading.
"""

from .validators import escape_txt, validate_domain_name, validate_ipv4, validate_ipv6

__all__ = ["escape_txt", "validate_domain_name", "validate_ipv4", "validate_ipv6"]
