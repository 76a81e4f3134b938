from dataclasses import dataclass
from typing import Optional


@dataclass
class Principal:
    user_id: str
    email: Optional[str] = None
