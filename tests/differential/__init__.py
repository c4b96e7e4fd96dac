"""
Differential tests: cpgscope algorithms against brute-force references.

Property-based tests using Hypothesis generate small random code property
graphs and check the production algorithms against slow, obviously correct
reference implementations (reachability closures, exhaustive path
enumeration, dense linear algebra) plus the structural properties every
result must satisfy.

Usage:
    pytest tests/differential/ -v
    pytest tests/differential/ -v --hypothesis-seed=42  # Reproducible
    pytest tests/differential/ --hypothesis-profile=thorough
"""
