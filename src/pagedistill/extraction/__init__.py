"""Standard-path article extraction."""

from .standard import ArticleExtractor, ExtractedArticle, StandardArticleExtractor

__all__ = [
    # Protocols
    "ArticleExtractor",
    # Implementations
    "ExtractedArticle",
    "StandardArticleExtractor",
]
