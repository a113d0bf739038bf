"""
Request Schemas

Pydantic models for the JSON bodies the API accepts. Bodies are
schema-less on the wire: every field is optional and unknown fields
are kept (extra="allow") so documents are stored as submitted.

Collections:
- users       -> UserPayload
- testimonial -> TestimonialPayload
- proposals   -> built from multipart form fields in main.make_proposal
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class UserPayload(BaseModel):
    """
    Users collection document
    Looked up by email; uniqueness is assumed, not enforced.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[Any] = Field(None, description="Full name")
    email: Optional[Any] = Field(None, description="Email address, used as the lookup key")
    displayName: Optional[Any] = None
    phoneNumber: Optional[Any] = None
    country: Optional[Any] = None
    role: Optional[Any] = Field(None, description="'admin' grants moderation access")

    def document(self) -> dict:
        # Only what the client sent; unsent optional fields must not overwrite stored ones
        submitted = set(self.model_fields_set) | set(self.model_extra or {})
        return {key: value for key, value in self.model_dump().items() if key in submitted}


class ProfileUpdate(BaseModel):
    displayName: Optional[Any] = None
    phoneNumber: Optional[Any] = None
    country: Optional[Any] = None

    def update_fields(self) -> dict:
        # Falsy values are skipped, so an empty string never clears a field
        return {
            key: value
            for key, value in (
                ("displayName", self.displayName),
                ("phoneNumber", self.phoneNumber),
                ("country", self.country),
            )
            if value
        }


class TestimonialPayload(BaseModel):
    """Free-form testimonial; pending until an admin sets approved=True"""
    model_config = ConfigDict(extra="allow")

    def document(self) -> dict:
        return self.model_dump()


class TestimonialAction(BaseModel):
    id: Optional[Any] = None
    user_email: Optional[Any] = None
