"""Catalog author schema."""

from pydantic import ConfigDict

from .common import CamelModel


class Author(CamelModel):
    """Author record from the remote catalog.

    Only the name fields are guaranteed; any extra profile fields the catalog
    returns are kept as-is.
    """

    id: int
    first_name: str
    last_name: str
    full_name: str

    model_config = ConfigDict(extra="allow")
