"""LastCall scheduling and workforce-onboarding engine."""

__version__ = "1.0.0"
