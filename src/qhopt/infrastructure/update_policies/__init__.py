from ._qhadam_update import QHAdamUpdate

__all__ = ["QHAdamUpdate"]
