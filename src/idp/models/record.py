"""
idp/models/record.py — Аудит-запись (append-only, write-once).
"""

from uuid import uuid4

from pydantic import Field

from idp.models.common import IdpBase, utc_now_iso


class RequestMeta(IdpBase):
    """Данные входящего запроса, нужные для аудита и OIDC issuer."""
    client_ip: str = ""
    method: str = ""
    request_uri: str = ""
    host: str = ""


class AuditRecord(IdpBase):
    owner: str = "built-in"
    name: str = Field(default_factory=lambda: uuid4().hex)
    created_time: str = Field(default_factory=utc_now_iso)
    organization: str = ""
    user: str = ""
    client_ip: str = ""
    method: str = ""
    request_uri: str = ""
    action: str = ""

    @classmethod
    def from_request(cls, meta: RequestMeta, action: str, **fields) -> "AuditRecord":
        return cls(
            client_ip=meta.client_ip,
            method=meta.method,
            request_uri=meta.request_uri,
            action=action,
            **fields,
        )
