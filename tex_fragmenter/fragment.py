"""Fragment and settings value types shared by every pass."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field

from tex_fragmenter.language import default_language

IGNORE = "ignore"


class Settings(BaseModel):
    """Immutable per-document configuration snapshot.

    Only ``language_short_code`` and ``latex_commands`` are interpreted here;
    any other field is carried through untouched for the checking engine.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    language_short_code: str = Field(default_factory=default_language)
    latex_commands: Dict[str, str] = Field(default_factory=dict)

    def with_language(self, language_short_code: str) -> Settings:
        """Return a copy of ``self`` with the active locale replaced."""
        return self.model_copy(update={"language_short_code": language_short_code})

    def ignore_command_prototypes(self) -> FrozenSet[str]:
        """Prototypes classified as ``ignore`` in ``latex_commands``."""
        return frozenset(k for k, v in self.latex_commands.items() if v == IGNORE)


@dataclass(frozen=True)
class CodeFragment:
    """Contiguous slice of the source document and the settings it is checked with."""

    code_language_id: str
    code: str
    from_pos: int
    settings: Settings

    @property
    def to_pos(self) -> int:
        return self.from_pos + len(self.code)

    def derive(self, code: str, from_pos: int, settings: Settings) -> CodeFragment:
        """Return a fragment of the same code language with new text and offset."""
        return replace(self, code=code, from_pos=from_pos, settings=settings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code_language_id": self.code_language_id,
            "from_pos": self.from_pos,
            "to_pos": self.to_pos,
            "language": self.settings.language_short_code,
            "code": self.code,
        }
