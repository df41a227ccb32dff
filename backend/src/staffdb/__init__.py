"""
staffdb - read-side queries over companies, their users and payments.
"""

__version__ = "0.1.0"
