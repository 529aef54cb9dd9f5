from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from content_engine.domain.models.content import ContentItem, ContentStatistics


class QualityCheckOptions(BaseModel):
    """Which auxiliary checks to run"""
    check_plagiarism: bool = True
    check_fact_accuracy: bool = True
    evaluate_seo: bool = True


class FactualError(BaseModel):
    """Factual error found in the content"""
    error_text: str
    correction: str
    source: Optional[str] = None


class QualityReport(BaseModel):
    """Findings of a quality assessment"""
    readability_score: float = 0.0
    seo_score: float = 0.0
    engagement_score: float = 0.0
    plagiarism_score: float = 0.0
    suggestions_by_category: Dict[str, List[str]] = Field(default_factory=dict)
    keywords: List[str] = Field(default_factory=list)
    factual_errors: List[FactualError] = Field(default_factory=list)

    def to_statistics(self) -> ContentStatistics:
        return ContentStatistics(
            readability_score=self.readability_score,
            seo_score=self.seo_score,
            engagement_score=self.engagement_score,
            plagiarism_score=self.plagiarism_score
        )


class QualityChecker(ABC):
    """Assesses edited content; findings are advisory and never fail the pipeline"""

    @abstractmethod
    async def check_content(self, content: ContentItem, options: QualityCheckOptions) -> QualityReport:
        pass
