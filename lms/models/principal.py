from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Verified caller identity extracted from the identity provider's JWT.

    Carried through the request via FastAPI's dependency system and passed
    explicitly into every service call as ``caller_id``.

        user_id: subject claim from the JWT
        roles: platform roles claimed by the identity provider
    """

    user_id: str
    roles: frozenset[str] = frozenset()
