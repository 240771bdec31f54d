"""Core domain layer - entities, interfaces, services and exceptions."""

from roastledger.core import entities, exceptions, interfaces

__all__ = ["entities", "interfaces", "exceptions"]
