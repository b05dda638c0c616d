"""Generated source-code artifacts."""

from pydantic import BaseModel, Field


class CodeArtifact(BaseModel):
    """One generated source file."""

    file_name: str = Field(..., description="Suggested file name")
    language: str = Field(default="python")
    content: str = Field(..., description="Source code")
    description: str = Field(default="")

    model_config = {"frozen": True}


class CodeArtifacts(BaseModel):
    """The bot/backtest pair produced by one code-generation request."""

    bot_code: CodeArtifact
    backtest_code: CodeArtifact

    model_config = {"frozen": True}
