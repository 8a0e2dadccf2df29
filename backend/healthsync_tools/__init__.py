from .disease_info import DiseaseInfoParseError, DiseaseInfoService, extract_json_object
from .scholar_search import ResearchPaper, ScholarSearch

__all__ = [
    "DiseaseInfoParseError",
    "DiseaseInfoService",
    "ResearchPaper",
    "ScholarSearch",
    "extract_json_object",
]
