from pydantic import BaseModel

from src.sohl.models.schemas import RollMode


class SohlSpeaker(BaseModel):
    """Who a test result is attributed to, and how visible its roll is."""
    name: str = ""
    alias: str | None = None
    actor_id: str | None = None
    token_id: str | None = None
    scene_id: str | None = None
    roll_mode: RollMode = RollMode.SYSTEM

    @property
    def display_name(self) -> str:
        return self.alias or self.name

    @property
    def is_blind(self) -> bool:
        return self.roll_mode in (RollMode.BLIND, RollMode.PRIVATE)
