from pydantic import BaseModel, ConfigDict, Field


class TokenPair(BaseModel):
    """Пара access/refresh токенов. Заменяется целиком при каждом обновлении."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(default="", alias="refreshToken")


class UserProfile(BaseModel):
    id: int
    name: str
    email: str
