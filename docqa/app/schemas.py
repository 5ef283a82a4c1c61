from __future__ import annotations

from pydantic import BaseModel, Field

from docqa.rag.types import AnswerResult


class PromptRequest(BaseModel):
    query: str


class DocLink(BaseModel):
    id: str
    title: str
    url: str
    similarity: float


class PromptResponse(BaseModel):
    message: str
    docs: list[DocLink] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: AnswerResult) -> PromptResponse:
        return cls(
            message=result.message,
            docs=[
                DocLink(id=doc.id, title=doc.title, url=doc.url, similarity=doc.similarity)
                for doc in result.docs
            ],
        )
