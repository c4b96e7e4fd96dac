"""
Shared Hypothesis configuration for differential tests.

Configuration:
- Default 200 examples per test (2000 for thorough mode)
- Reproducible seeds for CI
- Graph strategies live in tests/differential/strategies.py
"""

from hypothesis import HealthCheck, Phase, Verbosity, settings

# Register Hypothesis profiles
settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,  # Disable deadline for CI
    print_blob=True,  # Print reproduction info on failure
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.filter_too_much],
)

settings.register_profile(
    "thorough",
    max_examples=2000,
    deadline=None,
    print_blob=True,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.filter_too_much],
)

settings.register_profile(
    "dev",
    max_examples=50,
    deadline=None,
    print_blob=True,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

# Load CI profile by default
settings.load_profile("ci")
