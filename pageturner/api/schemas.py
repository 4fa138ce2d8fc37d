from typing import List, Optional

from pydantic import BaseModel, Field


class GenerateStoryRequest(BaseModel):
    prompt: Optional[str] = Field(default=None, description="Free-text idea for the story")


class StoryPageResponse(BaseModel):
    pageNumber: int
    title: str
    content: str
    characters: List[str]
    setting: str
    mood: str
    imageUrl: Optional[str] = Field(default=None, description="Base64 data URI of the page illustration")
    imagePrompt: Optional[str] = None
    error: Optional[str] = Field(default=None, description="Set when the page illustration failed")


class GenerateStoryResponse(BaseModel):
    title: str
    genre: str
    targetAge: str
    pages: List[StoryPageResponse]
    coverImageUrl: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
