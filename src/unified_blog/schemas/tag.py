"""Tag schema."""

from .common import CamelModel


class UnifiedTag(CamelModel):
    slug: str
    name: str
