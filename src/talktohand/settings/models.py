"""Data model for client settings."""

from pydantic import BaseModel, ConfigDict, Field

from ..config import DEFAULT_MODEL_NAME


class Settings(BaseModel):
    """Connection settings for the inference server.

    Instances are immutable; stores hand out a new snapshot on every change.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    server_url: str = Field(default="", description="Server base URL, e.g. http://localhost:1337")
    api_key: str = Field(default="", repr=False, description="Bearer token sent with every request")
    model_name: str = Field(default=DEFAULT_MODEL_NAME, description="Model identifier to request")
    streaming: bool = Field(default=True, description="Request a token stream instead of one body")

    @property
    def masked_api_key(self) -> str:
        """API key with all but the last four characters hidden."""
        if not self.api_key:
            return ""
        if len(self.api_key) <= 4:
            return "*" * len(self.api_key)
        return "*" * (len(self.api_key) - 4) + self.api_key[-4:]
