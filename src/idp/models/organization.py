"""
idp/models/organization.py — Модель организации.
"""

from pydantic import Field

from idp.models.common import IdpBase


class Organization(IdpBase):
    """Организация; ``tags`` — группы тегов вида ``"staff|guest"``."""
    owner: str = "admin"
    name: str
    created_time: str = ""
    display_name: str = ""
    website_url: str = ""
    favicon: str = ""
    password_type: str = "plain"
    password_salt: str = ""
    master_password: str = ""
    phone_prefix: str = ""
    default_avatar: str = ""
    tags: list[str] = Field(default_factory=list)
    enable_soft_deletion: bool = False
