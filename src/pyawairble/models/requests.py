"""Pydantic request models for client entrypoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyawairble.models.commands import WifiCredentials


class ProvisioningRequest(BaseModel):
    """Caller-supplied values for one provisioning run."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    country_code: str
    wifi: WifiCredentials
    mqtt_token: str = Field(default="", repr=False)

    @field_validator("country_code")
    @classmethod
    def _country_code_alpha2(cls, value: str) -> str:
        code = value.upper()
        if len(code) != 2 or not code.isalpha():
            raise ValueError(f"country_code must be a two-letter ISO code, got {value!r}")
        return code
