"""Typed views over the (tipo_entidad, entidad_id) pointer stored on reminders"""

from dataclasses import dataclass
from typing import Union

ENTITY_ORDER = "pedido"
ENTITY_CLIENT = "cliente"


@dataclass(frozen=True)
class OrderRef:
    order_id: int

    kind = ENTITY_ORDER

    def to_columns(self) -> tuple[str, str]:
        return self.kind, str(self.order_id)


@dataclass(frozen=True)
class ClientRef:
    client_id: int

    kind = ENTITY_CLIENT

    def to_columns(self) -> tuple[str, str]:
        return self.kind, str(self.client_id)


@dataclass(frozen=True)
class OtherRef:
    """Any entity kind the reminder core does not know about"""

    kind: str
    entity_id: str

    def to_columns(self) -> tuple[str, str]:
        return self.kind, self.entity_id


EntityRef = Union[OrderRef, ClientRef, OtherRef]


def entity_ref_from_columns(tipo_entidad: str, entidad_id: str) -> EntityRef:
    """Rebuild the typed reference; unknown kinds and non-numeric ids fall back to OtherRef"""
    kind = tipo_entidad.strip().lower()
    entity_id = str(entidad_id).strip()
    if kind in (ENTITY_ORDER, ENTITY_CLIENT) and entity_id.isdigit():
        if kind == ENTITY_ORDER:
            return OrderRef(int(entity_id))
        return ClientRef(int(entity_id))
    return OtherRef(tipo_entidad, str(entidad_id))
