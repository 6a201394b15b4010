"""Static permission table per role."""

from __future__ import annotations

ROLE_PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "ADMIN": {
        "clientes": {"crear": True, "editar": True, "eliminar": True, "ver": True},
        "medidas": {"crear": True, "editar": True, "eliminar": True, "ver": True},
        "pedidos": {"crear": True, "editar": True, "eliminar": True, "ver": True},
        "pagos": {"registrar": True, "editar": True, "eliminar": True, "ver": True},
        "usuarios": {"gestionar": True},
    },
    "OPERADOR": {
        "clientes": {"crear": False, "editar": False, "eliminar": False, "ver": True},
        "medidas": {"crear": True, "editar": True, "eliminar": False, "ver": True},
        "pedidos": {"crear": True, "editar": True, "eliminar": False, "ver": True},
        "pagos": {"registrar": True, "editar": False, "eliminar": False, "ver": True},
        "usuarios": {"gestionar": False},
    },
}


def role_allows(role: str, module: str, action: str) -> bool:
    return ROLE_PERMISSIONS.get(role, {}).get(module, {}).get(action, False)
