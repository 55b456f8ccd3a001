"""Ecosystem engine exception hierarchy.

Centralised base classes so callers can catch engine failures narrowly.
Extinction and equilibrium are normal outcomes and never raise.
"""


class EcosimError(Exception):
    """Root of all ecosystem-engine exceptions."""


class InvalidParametersError(EcosimError, ValueError):
    """A parameter set is missing a required block or holds a malformed value."""


class NumericDegeneracyError(EcosimError):
    """A computation would produce NaN or Infinity from the given parameters."""


class DivisionByZeroError(NumericDegeneracyError, ZeroDivisionError):
    """A parameter used as a divisor is zero."""
