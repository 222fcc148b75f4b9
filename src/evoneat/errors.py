"""
NEAT Errors Module

This module defines the exceptions raised by the package.

Classes:
    NeatError:          Base class for all package errors
    StructuralError:    A genome cannot be expressed as a feed-forward network (it contains a cycle)
    InputSizeError:     A network was activated with the wrong number of inputs
    SerializationError: A genome could not be converted to or from its textual form
"""

class NeatError(Exception):
    """Base class for all errors raised by this package."""

class StructuralError(NeatError):
    """
    Raised when a genome describes a cycle among its enabled connections
    but is compiled into a feed-forward network.

    The genome is phenotypically invalid; evaluators are expected to
    catch this and assign the genome a fitness of zero.
    """

class InputSizeError(NeatError, ValueError):
    """Raised when the number of inputs does not match the number of input neurons."""

class SerializationError(NeatError):
    """Raised when a genome cannot be serialized or deserialized."""
