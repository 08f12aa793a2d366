from pydantic import BaseModel, Field

from ibm_provider.infra.cbr.models import Address, Resource, RuleContext


class ZoneBody(BaseModel):
    name: str | None = Field(None, max_length=128)
    account_id: str | None = None
    description: str | None = Field(None, max_length=300)
    addresses: list[Address] | None = None
    excluded: list[Address] | None = None


class RuleBody(BaseModel):
    description: str | None = Field(None, max_length=300)
    contexts: list[RuleContext] | None = None
    resources: list[Resource] | None = None
