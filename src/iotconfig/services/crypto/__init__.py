"""Ed25519 keypairs and canonical request signing."""
from .keypair import KEY_TYPE_ED25519, Keypair, Network, PublicKey
from .signing import BatchSignResult, canonical_bytes, current_timestamp, sign, sign_batch, sign_in_place, verify

__all__ = [
    "KEY_TYPE_ED25519",
    "Keypair",
    "Network",
    "PublicKey",
    "BatchSignResult",
    "canonical_bytes",
    "current_timestamp",
    "sign",
    "sign_batch",
    "sign_in_place",
    "verify",
]
