"""pxgen — code generation ahead of cargo builds."""

__version__ = "0.1.0"
