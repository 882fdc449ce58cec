"""Pydantic models for Third Brain records."""

from pydantic import BaseModel, ConfigDict, Field, RootModel
from typing import Annotated, Literal, Optional, Union


# === RoamResearch Export ===

class ExportItem(BaseModel):
    """A block in a RoamResearch JSON export."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    string: str
    create_time: Optional[int] = Field(default=None, alias="create-time")
    edit_time: Optional[int] = Field(default=None, alias="edit-time")
    children: list["ExportItem"] = Field(default_factory=list)
    create_email: Optional[str] = Field(default=None, alias="create-email")
    edit_email: Optional[str] = Field(default=None, alias="edit-email")

    def count(self) -> int:
        """Number of blocks in this subtree, including this one."""
        total = 0
        stack = [self]
        while stack:
            item = stack.pop()
            total += 1
            stack.extend(item.children)
        return total


class ExportPage(BaseModel):
    """A page in a RoamResearch JSON export."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    edit_time: int = Field(alias="edit-time")
    create_time: Optional[int] = Field(default=None, alias="create-time")
    children: list[ExportItem] = Field(default_factory=list)
    create_email: Optional[str] = Field(default=None, alias="create-email")
    edit_email: Optional[str] = Field(default=None, alias="edit-email")


class RoamExport(RootModel[list[ExportPage]]):
    """A full export: a JSON array of pages."""

    @property
    def pages(self) -> list[ExportPage]:
        return self.root

    def count_items(self) -> int:
        return sum(child.count() for page in self.root for child in page.children)


# === Stored Records ===

class RootOf(BaseModel):
    """Owner of a root item: the page it sits on."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["page"] = "page"
    page_title: str


class ChildOf(BaseModel):
    """Owner of a nested item: its parent item."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["item"] = "item"
    item_id: str


# An item is owned by exactly one of a page or a parent item
Owner = Annotated[Union[RootOf, ChildOf], Field(discriminator="kind")]


class Page(BaseModel):
    """A stored page: the root container of an outline."""

    title: str
    create_time: Optional[int] = None
    edit_time: int


class Item(BaseModel):
    """A stored block within a page's outline."""

    id: str
    owner: Owner
    order_in_parent: int = Field(ge=0)
    contents: str
    create_time: Optional[int] = None
    edit_time: Optional[int] = None


class ItemEmbedding(BaseModel):
    """The vector for an item, with the exact text that produced it."""

    item_id: str
    embedded_text: str
    embedding: list[float]

    @property
    def dimensionality(self) -> int:
        return len(self.embedding)


# === Config ===

class ThirdBrainConfig(BaseModel):
    """Configuration for Third Brain."""

    version: str = "0.1.0"
    embedding_model: str = "text-embedding-ada-002"
    chat_model: str = "gpt-4-turbo"  # Alias from llm.MODELS or an OpenAI model name
    batch_size: int = Field(default=512, ge=1)  # Texts per embedding request
    request_concurrency: int = Field(default=4, ge=1)  # Embedding requests in flight
    max_retries: int = Field(default=6, ge=0)  # Provider retries, exponential backoff
    search_top_k: int = Field(default=32, ge=1)
    answer_top_k: int = Field(default=512, ge=1)
    distance_metric: Literal["cosine", "euclidean"] = "cosine"
    command_logging: bool = True  # Log command invocations to .thirdbrain-logs/
