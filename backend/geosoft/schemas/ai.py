from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from geosoft.models.user import AppSource


class PromptRequest(BaseModel):
    app_type: AppSource = Field(alias="appType")
    user_prompt: str = Field(alias="userPrompt", min_length=1, max_length=20_000)
    additional_context: str | None = Field(default=None, alias="additionalContext", max_length=20_000)
    include_capabilities: bool = Field(default=False, alias="includeCapabilities")

    model_config = ConfigDict(populate_by_name=True)


class PromptResponse(BaseModel):
    response: str
    app_type: AppSource = Field(alias="appType")

    model_config = ConfigDict(populate_by_name=True)


class AppInfoOut(BaseModel):
    app_type: AppSource = Field(alias="appType")
    instructions: str
    context: str
    capabilities: list[str]

    model_config = ConfigDict(populate_by_name=True)
