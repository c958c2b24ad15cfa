"""Use cases, one class each."""

from .account import CreateAccount
from .base import Logic, LogicServices, RequestContext
from .dashboard import Homepage, ShowRecentMetadata
from .domains import GetDomainBrand, UpdateDomainBrand
from .secrets import BurnSecret, CreateSecret, ShowMetadata, ShowSecret

__all__ = [
    "BurnSecret",
    "CreateAccount",
    "CreateSecret",
    "GetDomainBrand",
    "Homepage",
    "Logic",
    "LogicServices",
    "RequestContext",
    "ShowMetadata",
    "ShowRecentMetadata",
    "ShowSecret",
    "UpdateDomainBrand",
]
