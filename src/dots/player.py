"""A seated player"""

from dataclasses import dataclass

from src.core.models import PlayerInfo
from src.core.shared_types import Seat


@dataclass
class Player:
    id: str
    seat: Seat
    connected: bool = True

    def to_info(self) -> PlayerInfo:
        return PlayerInfo(id=self.id, seat=self.seat, connected=self.connected)
