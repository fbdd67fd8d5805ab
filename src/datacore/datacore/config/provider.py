# ABOUTME: Data provider configuration for identifier generation and storage limits
# ABOUTME: Settings consumed when wiring in-memory providers and id generators

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    """Configuration for data providers and identifier generation.

    Attributes:
        ID_GENERATOR: Which identifier generator `create_id_generator` builds.
        SEQUENTIAL_ID_PREFIX: Prefix prepended to sequential identifiers.
        SEQUENTIAL_ID_START: First counter value handed out by the sequential generator.
        MAX_ENTITIES: Upper bound on stored entities for in-memory providers.
    """

    ID_GENERATOR: Literal["uuid", "sequential"] = Field(
        default="uuid",
        description="Identifier generation strategy for newly created entities.",
    )
    SEQUENTIAL_ID_PREFIX: str = Field(
        default="",
        description="Prefix for identifiers produced by the sequential generator.",
    )
    SEQUENTIAL_ID_START: int = Field(
        default=1,
        ge=0,
        description="Starting counter value for the sequential generator.",
    )
    MAX_ENTITIES: int = Field(
        default=100_000,
        gt=0,
        description="Maximum number of entities an in-memory provider will hold.",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("ID_GENERATOR", mode="before")
    @classmethod
    def validate_id_generator_case_insensitive(cls, v: str) -> str:
        """Validate ID_GENERATOR with case-insensitive normalization.

        Accepts `uuid4` as an alias for `uuid` and `seq` for `sequential`.
        """
        if isinstance(v, str):
            v_lower = v.lower().strip()
            generator_mapping = {
                "uuid": "uuid",
                "uuid4": "uuid",
                "seq": "sequential",
                "sequential": "sequential",
            }
            return generator_mapping.get(v_lower, v_lower)
        return v
