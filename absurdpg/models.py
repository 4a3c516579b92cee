"""Shared dataclasses passed between the state machine and the probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True, slots=True)
class ConnectionParameters:
    """Connection values exactly as typed into the form."""

    host: str = ""
    port: str = ""
    user: str = ""
    password: str = ""
    database: str = ""


@dataclass(frozen=True, slots=True)
class ProbeSuccess:
    """Tables and row counts gathered by a completed probe."""

    tables: tuple[str, ...] = ()
    row_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProbeFailure:
    """Human readable reason a probe could not finish."""

    reason: str


IntrospectionResult = ProbeSuccess | ProbeFailure


__all__ = ["ConnectionParameters", "IntrospectionResult", "ProbeFailure", "ProbeSuccess"]
