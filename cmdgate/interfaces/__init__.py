"""Boundary contracts shared with the command-execution endpoint."""

from cmdgate.interfaces.request import CommandExecutionRequest, parse_request

__all__ = ["CommandExecutionRequest", "parse_request"]
