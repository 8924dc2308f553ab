from .gateway import FakeGateway, ok, failure
from .factories import (
    mk_signer, mk_address, b64, mk_event, mk_settled_tx, mk_network_status,
)

__all__ = [
    "FakeGateway",
    "ok",
    "failure",
    "mk_signer",
    "mk_address",
    "b64",
    "mk_event",
    "mk_settled_tx",
    "mk_network_status",
]
