"""Project structure document schemas.

The document is a recursive tree: a folder holds ``files`` (leaves) and
``folders`` (subtrees). Keeping the two node kinds in separate typed lists
means traversal never has to inspect a node to learn what it is.

Keys the schema does not name are kept and stored with the document, so
client extension metadata survives a save and reload.
"""
from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt


class FileStat(BaseModel):
    """Activity counters for a single file."""

    model_config = ConfigDict(extra="allow")

    file_name: str
    idle_duration: NonNegativeFloat = 0
    total_duration: NonNegativeFloat = 0
    keystrokes_count: NonNegativeInt = 0
    file_switch_count: NonNegativeInt = 0


class FolderNode(BaseModel):
    """A folder with its files and nested folders."""

    model_config = ConfigDict(extra="allow")

    folder_name: str
    files: List[FileStat] = Field(default_factory=list)
    folders: List["FolderNode"] = Field(default_factory=list)


class ProjectStructure(BaseModel):
    """Root of a project's structure document."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    project_name: str = Field(
        default="",
        validation_alias=AliasChoices("project_name", "name"),
    )
    files: List[FileStat] = Field(default_factory=list)
    folders: List[FolderNode] = Field(default_factory=list)


FolderNode.model_rebuild()
