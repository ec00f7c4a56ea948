"""Schemas for search results and cited web responses."""

from pydantic import AnyUrl, BaseModel, Field


class SearchResult(BaseModel):
    """Summarized search response with the citations of the sources used."""

    model_config = {"frozen": True}

    summary: str = Field(..., description="The search result summary.")
    citations: list[AnyUrl] = Field(default_factory=list, description="Sources used in the summary.")

    def __str__(self) -> str:
        return "\n\n".join([self.summary, *(str(c) for c in self.citations)])


class WebPage(BaseModel):
    """One ranked page from a web search."""

    model_config = {"frozen": True}

    url: AnyUrl
    snippet: str = ""
    name: str = ""


class WebSearchResponse(BaseModel):
    """Ranked web search results. Pages are in rank order."""

    model_config = {"frozen": True}

    original_query: str = Field(..., description="The query as echoed back by the search API.")
    pages: list[WebPage] = Field(default_factory=list)


class CitedWebResponse(BaseModel):
    """One page's answer to a question, paired with the page as its citation."""

    model_config = {"frozen": True}

    text: str = Field(..., description="The web response as a string.")
    citation: AnyUrl = Field(..., description="The citation for the web response.")


class CitedWebResponses(BaseModel):
    """A synthesis of several cited web responses."""

    model_config = {"frozen": True}

    summary: str = Field(..., description="A summary of the aggregated responses.")
    responses: list[CitedWebResponse] = Field(default_factory=list)

    def __str__(self) -> str:
        return "\n\n".join([self.summary, *(str(r.citation) for r in self.responses)])
