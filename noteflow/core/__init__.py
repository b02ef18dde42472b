"""
Core infrastructure.

Configuration, logging, exceptions, security, and shared utilities.
"""
