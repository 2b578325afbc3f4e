from pydantic import BaseModel, ConfigDict


class Identity(BaseModel):
    """Authenticated caller attached to a request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str | None = None
