"""Records stored in Redis."""

from .base import RedisModel, generate_id
from .custom_domain import BRAND_KEYS, CustomDomain, split_domain
from .customer import Customer, hash_password, verify_password
from .metadata import Metadata, MetadataState
from .secret import MAX_VALUE_LENGTH, Secret, SecretState
from .session import Session, subject_for

__all__ = [
    "BRAND_KEYS",
    "CustomDomain",
    "Customer",
    "MAX_VALUE_LENGTH",
    "Metadata",
    "MetadataState",
    "RedisModel",
    "Secret",
    "SecretState",
    "Session",
    "generate_id",
    "hash_password",
    "split_domain",
    "subject_for",
    "verify_password",
]
