"""stratum: lifecycle management for union-mounted, signed repositories."""

__version__ = "0.1.0"
