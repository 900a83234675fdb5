from .pattern_extractor import PatternClaimExtractor

__all__ = ["PatternClaimExtractor"]
