"""Validation module - Requirement metadata and cross-reference checks.

Provides validators that run on a linked graph and report defects
independently of status propagation.
"""

from reqtraq.validation.attributes import AttributeRule, check_attributes, parse_schema
from reqtraq.validation.references import check_cross_references

__all__ = [
    "AttributeRule",
    "check_attributes",
    "check_cross_references",
    "parse_schema",
]
