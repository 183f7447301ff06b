# Extraction module
from .service import Nl2SqlService, KeywordExtraction

__all__ = ["Nl2SqlService", "KeywordExtraction"]
