from src.ports.auth import AuthPort as AuthAdapterPort
from src.ports.clock import ClockPort as TimePort
from src.ports.repo import GameStorePort, TokenRepoPort, UserRepoPort

__all__ = ["AuthAdapterPort", "GameStorePort", "TimePort", "TokenRepoPort", "UserRepoPort"]
