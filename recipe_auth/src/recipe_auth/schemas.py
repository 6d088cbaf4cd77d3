# src/recipe_auth/schemas.py

from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, AliasChoices, AnyHttpUrl, AwareDatetime, BaseModel, ConfigDict, Field


def _check_email(value: str) -> str:
    # Format check only: the address is stored exactly as the backend sent it.
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class UserProfile(BaseModel):
    """
    Profile of the signed-in user as returned by the Random Recipe backend.
    The backend DTO calls the identifier 'googleUserId'; both names are accepted on input.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    external_id: str = Field(
        alias="externalId",
        validation_alias=AliasChoices("externalId", "googleUserId"),
    )
    email: Email
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# Response from /api/account/mobile-auth-init
class InitializeAuthResponse(BaseModel):
    auth_url: AnyHttpUrl = Field(alias="authUrl")
    state: str


# Request to /api/account/mobile-auth-complete
class CompleteAuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    state: str
    redirect_uri: str = Field(alias="redirectUri")


# Response from /api/account/mobile-auth-complete
class CompleteAuthResponse(BaseModel):
    user: UserProfile
    token: str
    expires_at: AwareDatetime = Field(alias="expiresAt")
