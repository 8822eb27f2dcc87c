"""Link relations offered by Hub resources and the outcome of following one.

`RelationOutcome` keeps "the resource has no such link" apart from "the link
exists but could not be fetched". Callers of the resolver only ever see the
collapsed form (`None` / `[]`); the distinction is kept for logging and tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from core.domain.models import HubResource


class Relation(str, Enum):
    """Relation names the client knows how to follow."""

    COMPONENTS = "components"
    VULNERABILITIES = "vulnerabilities"
    POLICY_RULES = "policy-rules"
    REFERENCES = "references"
    RISK_PROFILE = "risk-profile"

    def __str__(self) -> str:
        return self.value


class VulnerabilitySource(str, Enum):
    NVD = "NVD"
    VULNDB = "VULNDB"


@dataclass(frozen=True)
class Ok:
    value: HubResource


@dataclass(frozen=True)
class Absent:
    relation: str


@dataclass(frozen=True)
class Failed:
    relation: str
    error: Exception


RelationOutcome = Union[Ok, Absent, Failed]


def collapse(outcome: RelationOutcome) -> HubResource | None:
    if isinstance(outcome, Ok):
        return outcome.value
    return None
