from .quality_checker import QualityChecker, QualityCheckOptions, QualityReport, FactualError

__all__ = ["QualityChecker", "QualityCheckOptions", "QualityReport", "FactualError"]
