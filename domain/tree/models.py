"""Keyword tree node models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Search-intent category of a Level1 keyword."""

    TRAFFIC = "Traffic"
    COMPARISON = "Comparison"
    CONVERSION = "Conversion"


class Stage(str, Enum):
    """User-behavior stage of a Level2 keyword."""

    AWARENESS = "Awareness"
    DECISION = "Decision"
    TRUST = "Trust"
    ACTION = "Action"


class NodeLevel(str, Enum):
    LEVEL1 = "level1"
    LEVEL2 = "level2"
    TERM = "term"


class LsiTerm(BaseModel):
    """Leaf term attached to a Level2 node."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class Level2Node(BaseModel):
    """Sub-core keyword. `stage` keeps the full label, qualifier included."""

    model_config = ConfigDict(frozen=True)

    id: str
    keyword: str
    stage: str
    terms: tuple[LsiTerm, ...] = Field(default_factory=tuple)

    @property
    def stage_kind(self) -> Stage | None:
        """Stage named by the label prefix, or by its parenthetical qualifier."""
        label = self.stage.strip()
        for stage in Stage:
            if label.startswith(stage.value) or f"({stage.value})" in label:
                return stage
        return None


class Level1Node(BaseModel):
    """Core keyword for one page kind."""

    model_config = ConfigDict(frozen=True)

    id: str
    keyword: str
    category: Category
    page_kind: str
    children: tuple[Level2Node, ...] = Field(default_factory=tuple)


KeywordNode = Level1Node | Level2Node | LsiTerm
