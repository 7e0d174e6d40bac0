"""
Explicit per-request caller context.

Every service operation takes the caller's identity as an argument instead of
reaching for an ambient "current user".
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    email: Optional[str] = None
