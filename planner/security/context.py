from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context, attached to `request.state.authz` by the
    guard stage once the caller is identified.

    Scope decisions are not cached here: handlers ask the resolver with `user_id`.
    """

    user_id: int
