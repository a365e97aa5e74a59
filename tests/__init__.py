"""
Test suite for the order rollup engine

Contains:
- tests/unit/          : Unit tests for domain models, contracts, resolver, aggregator, engine
"""
