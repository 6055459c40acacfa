"""Technique modules.

Every .py file in this package that defines a `technique` object is
auto-registered by contrast_checker.registry.discover().
"""
