# schemas/auth_schema.py
from pydantic import BaseModel, ConfigDict, Field


class AuthIdentity(BaseModel):
    id: str
    address: str


class SigninRequest(BaseModel):
    message: str
    signature: str
    signer_address: str = Field(..., alias="signerAddress")

    model_config = ConfigDict(populate_by_name=True)


class SigninData(BaseModel):
    address: str
    access_token: str
