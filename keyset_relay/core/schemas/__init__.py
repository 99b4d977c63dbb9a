"""Shared response schemas."""

from keyset_relay.core.schemas.problem_details import ProblemDetails

__all__ = ["ProblemDetails"]
