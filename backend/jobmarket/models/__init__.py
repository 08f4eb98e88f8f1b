from jobmarket.models.kv import KvEntry
from jobmarket.models.account import Account

__all__ = ["KvEntry", "Account"]
