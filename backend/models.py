from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChatMessage(BaseModel):
    """One history entry on the /chat wire.

    Accepts both the role/content shape and the isUser/text shape used by
    the browser transcript, normalizing to role/content.
    """
    role: Literal["user", "assistant"]
    content: str

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data):
        if isinstance(data, dict) and "role" not in data and "isUser" in data:
            return {
                "role": "user" if data.get("isUser") else "assistant",
                "content": data.get("text", ""),
            }
        return data


class ChatRequest(BaseModel):
    """Request body for POST /chat"""
    model_config = ConfigDict(populate_by_name=True)

    history: List[ChatMessage] = []
    user_input: str = Field(alias="userInput")


class ChatResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    error: str


class Replacement(BaseModel):
    value: str


class GrammarMatch(BaseModel):
    """A single grammar-checker finding (LanguageTool match)"""
    message: str
    replacements: List[Replacement] = []
    offset: Optional[int] = None
    length: Optional[int] = None


class GrammarCheckResponse(BaseModel):
    matches: List[GrammarMatch] = []


class HealthResponse(BaseModel):
    status: str = "ok"
    model: Optional[str] = None
    config: dict = {}
