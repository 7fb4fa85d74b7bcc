"""WPPD - WordPress plugin drift tracker."""

__version__ = "0.1.0"
