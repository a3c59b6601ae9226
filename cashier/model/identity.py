from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict


class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    uid: str
    first_name: str | None = None
    user_name: str | None = None


@dataclass(frozen=True)
class Unresolved:
    pass


@dataclass(frozen=True)
class ManualMatch:
    profile: Profile


@dataclass(frozen=True)
class BiometricMatch:
    profile: Profile
    is_new: bool = False


@dataclass(frozen=True)
class Confirmed:
    profile: Profile


Candidate = Union[Unresolved, ManualMatch, BiometricMatch, Confirmed]

UNRESOLVED = Unresolved()


class ReconciliationIntent(enum.Enum):
    NONE = "none"
    FORCE_CORRECTION = "force_correction"


class MergeType(str, enum.Enum):
    # merge: a known customer was recognised as new, alias the new uid onto it
    # correct: a known customer was recognised as somebody else
    MERGE = "merge"
    CORRECT = "correct"
