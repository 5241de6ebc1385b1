"""
Cipherlink - Bootstrap Plan

External configuration driving secret discovery: where to look (candidate
origins), what to look for (one regex per logical key) and which values are
supplied directly instead of being searched for.
"""

import re

from pydantic import BaseModel, Field, field_validator

from ..exceptions import ConfigError


class BootstrapPlan(BaseModel):
    """Candidate origins, key patterns and static values.

    Every pattern must compile and contain exactly one capture group; the
    captured text becomes the value of its key.
    """

    origins: list[str] = Field(default_factory=list)
    patterns: dict[str, str] = Field(default_factory=dict)
    static: dict[str, str] = Field(default_factory=dict)

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: dict[str, str]) -> dict[str, str]:
        for key, pattern in v.items():
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                raise ConfigError(f"Pattern for {key} does not compile: {e}", config_key=key) from e
            if compiled.groups != 1:
                raise ConfigError(
                    f"Pattern for {key} must have exactly one capture group, has {compiled.groups}",
                    config_key=key,
                )
        return v

    def search_patterns(self) -> dict[str, re.Pattern[str]]:
        """Compiled patterns for the keys not supplied statically."""
        return {key: re.compile(pattern) for key, pattern in self.patterns.items() if key not in self.static}
