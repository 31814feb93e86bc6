from .account import UserAccount
from .db import Base

__all__ = [
	"Base",
	"UserAccount",
]
