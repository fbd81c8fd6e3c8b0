"""
Writable WMI

A CLI tool for enumerating WMI class definitions and finding properties
that are marked writable and match a requested CIM data type.
"""

__version__ = "1.0.0"
__author__ = "Security Assessment Team"
