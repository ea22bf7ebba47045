"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base for payloads handed to callers."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Base for inputs; unexpected fields are rejected."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, str_strip_whitespace=True)
