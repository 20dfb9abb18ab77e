"""
Data models and contracts module.

Immutable analysis results, the classification vocabulary, and the trade plan
contract. Follows functional programming principles with frozen dataclasses.
"""
