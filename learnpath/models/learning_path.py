"""
Learning path data model.

The module list is opaque: each module is kept as the dictionary the model
produced (title, description, estimatedTime and/or resources, plus any
extra keys), after shape validation.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class LearningPath:
    """
    Personalized learning path.

    Attributes:
        objective: What the learner is working towards
        knowledge_level: Level label echoed by the model
        modules: Ordered module dictionaries
    """
    objective: str
    knowledge_level: str
    modules: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_envelope(cls, envelope: Dict[str, Any]) -> "LearningPath":
        """Build from a validated ``{"learningPath": {...}}`` envelope."""
        body = envelope["learningPath"]
        return cls(
            objective=body["objective"],
            knowledge_level=body["knowledgeLevel"],
            modules=deepcopy(body["modules"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape."""
        return {
            "objective": self.objective,
            "knowledgeLevel": self.knowledge_level,
            "modules": deepcopy(self.modules),
        }

    @property
    def module_titles(self) -> List[str]:
        return [module.get("title", "") for module in self.modules]
