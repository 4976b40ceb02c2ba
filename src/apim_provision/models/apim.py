"""Pydantic models for API Management resources.

ARM returns every resource as ``{"id": ..., "name": ..., "properties": {...}}``;
the ``from_arm`` constructors flatten that envelope into the fields the
provisioning helpers work with.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict

SubscriptionState = Literal["active", "cancelled", "expired", "rejected", "submitted", "suspended"]


def _properties(payload: dict) -> dict:
    props = payload.get("properties")
    return props if isinstance(props, dict) else {}


class UserRecord(BaseModel):
    """A directory principal registered in API Management.

    ``id`` is the full ARM resource id, ``name`` the short user id used in
    resource paths.  ``objectId`` is the external (B2C / AAD) identity, when any.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None
    email: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    state: str | None = None
    objectId: str | None = None

    @classmethod
    def from_arm(cls, payload: dict) -> "UserRecord":
        props = _properties(payload)
        identities = props.get("identities") or []
        object_id = next(
            (i.get("id") for i in identities if isinstance(i, dict) and i.get("id")),
            None,
        )
        return cls(
            id=payload.get("id"),
            name=payload.get("name"),
            email=props.get("email"),
            firstName=props.get("firstName"),
            lastName=props.get("lastName"),
            state=props.get("state"),
            objectId=object_id,
        )


class SubscriptionRecord(BaseModel):
    """A subscription binding a user to a product, with its two keys."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None
    userId: str | None = None
    productId: str | None = None
    displayName: str | None = None
    state: str | None = None
    primaryKey: str | None = None
    secondaryKey: str | None = None
    createdDate: str | None = None

    @classmethod
    def from_arm(cls, payload: dict) -> "SubscriptionRecord":
        props = _properties(payload)
        return cls(
            id=payload.get("id"),
            name=payload.get("name"),
            # 2018-06-01-preview and later name these ownerId / scope
            userId=props.get("ownerId") or props.get("userId"),
            productId=props.get("scope") or props.get("productId"),
            displayName=props.get("displayName"),
            state=props.get("state"),
            primaryKey=props.get("primaryKey"),
            secondaryKey=props.get("secondaryKey"),
            createdDate=props.get("createdDate"),
        )


class SubscriptionCreateParameters(BaseModel):
    """Body of a subscription ``createOrUpdate`` call."""

    userId: str
    productId: str
    displayName: str
    state: SubscriptionState = "active"

    def to_arm(self) -> dict:
        return {
            "properties": {
                "ownerId": self.userId,
                "scope": self.productId,
                "displayName": self.displayName,
                "state": self.state,
            }
        }


class ProductRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None
    displayName: str | None = None
    state: str | None = None

    @classmethod
    def from_arm(cls, payload: dict) -> "ProductRecord":
        props = _properties(payload)
        return cls(
            id=payload.get("id"),
            name=payload.get("name"),
            displayName=props.get("displayName"),
            state=props.get("state"),
        )


class GroupRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None
    displayName: str | None = None

    @classmethod
    def from_arm(cls, payload: dict) -> "GroupRecord":
        props = _properties(payload)
        return cls(
            id=payload.get("id"),
            name=payload.get("name"),
            displayName=props.get("displayName"),
        )
