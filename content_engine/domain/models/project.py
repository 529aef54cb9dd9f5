from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field
import uuid


class Project(BaseModel):
    """Client project that owns content items and a context window"""
    project_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    client_id: Optional[str] = Field(None, description="Owning client identifier")
    client_name: str = Field(default="Client")
    title: str
    description: str = ""
    target_audience: str = Field(default="general audience")
    brand_voice: str = Field(default="professional")
    industry: str = Field(default="general")
    content_goals: List[str] = Field(default_factory=lambda: ["inform", "engage", "convert"])
    keywords: List[str] = Field(default_factory=list)
    style_preferences: Dict[str, str] = Field(default_factory=dict)

    def domain_knowledge(self) -> Dict[str, Any]:
        """Client-specific facts injected into the project's context window"""
        knowledge: Dict[str, Any] = {
            "industry": self.industry,
            "brand_voice": self.brand_voice,
            "target_audience": self.target_audience,
            "content_goals": list(self.content_goals),
        }
        for key, value in self.style_preferences.items():
            knowledge[f"style_{key}"] = value
        return knowledge
