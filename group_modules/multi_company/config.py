"""Multi-company module configuration."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from group_config.schema import AppConfig

# Actor recorded on writes made without a user (seeding, scripts)
SYSTEM_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")


@dataclass(frozen=True)
class MultiCompanyConfig:
    """Defaults for the multi-company facade."""

    default_scope: str = "full"
    default_period: str = "2024-12"
    system_actor_id: UUID = SYSTEM_ACTOR_ID
    idempotency_producer: str = "multi_company"

    @classmethod
    def from_app_config(cls, config: AppConfig) -> MultiCompanyConfig:
        return cls(
            default_scope=config.consolidation.default_scope,
            default_period=config.consolidation.default_period,
        )
