"""World's oldest person titleholder table normalizer."""

__version__ = "0.1.0"
