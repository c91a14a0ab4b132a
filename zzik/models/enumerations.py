from enum import Enum

class Category(str, Enum):
    FASHION = "fashion"
    BEAUTY = "beauty"
    KPOP = "kpop"
    FOOD = "food"
    CAFE = "cafe"
    LIFESTYLE = "lifestyle"
    CULTURE = "culture"
    TECH = "tech"
    # Only referenced by the related-category table
    ENTERTAINMENT = "entertainment"
    TRAVEL = "travel"
    ART = "art"
    GAMING = "gaming"

class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class LeaderTier(str, Enum):
    NANO = "nano"      # < 1K followers
    MICRO = "micro"    # 1K - 10K
    MID = "mid"        # 10K - 100K
    MACRO = "macro"    # 100K - 1M
    MEGA = "mega"      # 1M+

class InteractionType(str, Enum):
    VIEW = "view"
    PARTICIPATE = "participate"
    COMPLETE = "complete"

class RecommendationStrategy(str, Enum):
    HYBRID = "hybrid"
    COLLABORATIVE = "collaborative"
    CONTENT = "content"
    POPULAR = "popular"
    TRENDING = "trending"
