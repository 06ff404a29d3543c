"""
Résolution d'identité (collaborateur Identity du checkout).
Le checkout n'a besoin que de l'id et de l'e-mail de l'utilisateur courant.
"""
from typing import Any, Dict

from .repository import get_user_from_access_token as _repo_get_user_from_token

def get_user_from_token(token: str) -> Dict[str, Any]:
    """Retourne {"id", "email", "metadata"}; id=None si le token est invalide."""
    raw = _repo_get_user_from_token(token)
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": raw.get("user_metadata") or {},
    }
