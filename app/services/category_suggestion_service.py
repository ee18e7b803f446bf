"""
Keyword-based category suggestions for new transactions.

A description is matched against a fixed keyword map first. When that gives
no confident answer, the user's own past transactions with a similar
description are consulted.
"""
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
import logging
import re

from app.models.category import Category, CategoryTypeEnum
from app.models.transaction import Transaction
from app.schemas.category import CategorySuggestion, CategorySuggestionResponse, SuggestionMethod
from app.utils import decimal_utils as dec

logger = logging.getLogger(__name__)

EXPENSE_KEYWORDS: Dict[str, List[str]] = {
    "Food": [
        "restaurant", "food", "lunch", "dinner", "breakfast", "cafe", "coffee",
        "pizza", "burger", "sandwich", "meal", "grocery", "supermarket",
        "mcdonald", "starbucks", "domino", "kfc", "taco", "chipotle",
        "bakery", "deli", "bistro", "diner", "eatery", "buffet", "cuisine",
        "takeout", "uber eats", "doordash", "grubhub",
    ],
    "Transportation": [
        "uber", "lyft", "taxi", "cab", "bus", "train", "subway", "metro",
        "gas", "fuel", "petrol", "parking", "toll", "car", "vehicle",
        "fare", "transit", "transport", "commute", "ride",
    ],
    "Shopping": [
        "amazon", "ebay", "walmart", "target", "store", "shop", "mall",
        "purchase", "order", "retail", "clothing", "clothes",
        "shoes", "apparel", "fashion", "accessories", "electronics",
        "online", "shipping", "checkout",
    ],
    "Entertainment": [
        "movie", "cinema", "theater", "concert", "show",
        "netflix", "spotify", "hulu", "disney", "streaming", "subscription",
        "game", "gaming", "xbox", "playstation", "steam", "entertainment",
        "museum", "zoo", "event", "festival", "recreation",
    ],
    "Healthcare": [
        "doctor", "hospital", "clinic", "pharmacy", "medicine", "medical",
        "health", "dental", "dentist", "prescription", "drugs", "treatment",
        "copay", "appointment", "checkup", "surgery",
        "therapy", "counseling", "wellness", "fitness", "gym",
    ],
    "Utilities": [
        "electric", "electricity", "water", "internet", "phone",
        "cable", "utility", "bill", "verizon", "at&t", "comcast",
        "power", "energy", "heating", "trash", "sewage",
    ],
    "Rent": [
        "rent", "lease", "landlord", "apartment", "housing",
        "mortgage", "property", "tenant", "residence",
    ],
    "Travel": [
        "hotel", "airbnb", "booking", "vacation", "trip", "resort",
        "lodging", "accommodation", "flight", "airline", "airport",
        "luggage", "passport", "tourist", "travel",
    ],
    "Education": [
        "tuition", "school", "university", "college", "course", "class",
        "textbook", "book", "udemy", "coursera", "workshop", "seminar",
    ],
}

INCOME_KEYWORDS: Dict[str, List[str]] = {
    "Salary": [
        "salary", "paycheck", "wage", "income", "pay", "payroll",
        "employment", "compensation", "earnings", "job",
    ],
    "Freelance": [
        "freelance", "contract", "gig", "project", "client", "invoice",
        "consulting", "independent", "self-employed", "upwork", "fiverr",
    ],
    "Investment": [
        "dividend", "interest", "capital gains", "investment", "stock",
        "bond", "fund", "portfolio", "returns", "profit", "trading",
    ],
    "Gift": [
        "gift", "present", "donation", "bonus", "reward", "prize",
        "windfall", "inheritance", "grant", "award",
    ],
    "Other": [
        "refund", "reimbursement", "rebate", "cashback",
        "misc", "miscellaneous", "other", "various", "side hustle",
    ],
}

WHOLE_WORD_SCORE = 10
PARTIAL_SCORE = 5
MIN_KEYWORD_CONFIDENCE = 50
# A keyword match at or above this is returned without looking at history
CONFIDENT_KEYWORD_MATCH = 70
MIN_SIMILARITY = 50
HISTORY_LIMIT = 100


def keywords_for(transaction_type: CategoryTypeEnum) -> Dict[str, List[str]]:
    return EXPENSE_KEYWORDS if transaction_type == CategoryTypeEnum.EXPENSE else INCOME_KEYWORDS


def suggest_by_keywords(description: str, transaction_type: CategoryTypeEnum) -> Optional[CategorySuggestion]:
    """
    Score every category of the transaction type against the description.

    A keyword found as a whole word scores 10, inside another word 5.
    Confidence is the score times five, capped at 100; below 50 there is no
    suggestion. Ties keep the category listed first.
    """
    text = (description or "").lower().strip()
    if not text:
        return None

    best = None
    highest_score = 0
    for category, patterns in keywords_for(transaction_type).items():
        score = 0
        matched = []
        for keyword in patterns:
            if keyword not in text:
                continue
            if re.search(rf"\b{re.escape(keyword)}\b", text):
                score += WHOLE_WORD_SCORE
            else:
                score += PARTIAL_SCORE
            matched.append(keyword)

        confidence = min(100, score * 5)
        if score > highest_score and confidence >= MIN_KEYWORD_CONFIDENCE:
            highest_score = score
            best = CategorySuggestion(
                category=category,
                confidence=confidence,
                reason=f"Matched keywords: {', '.join(matched[:3])}",
            )
    return best


def _significant_words(text: str) -> List[str]:
    return [word for word in text.lower().split() if len(word) > 2]


def description_similarity(first: str, second: str) -> int:
    """Share of significant words (longer than two letters) the two texts have in common, 0-100"""
    words1 = _significant_words(first)
    words2 = _significant_words(second)
    if not words1 or not words2:
        return 0

    common = [word for word in words1 if word in words2]
    ratio = dec.percentage(len(common), max(len(words1), len(words2)))
    return int(dec.round_decimal(ratio, 0))


def find_historical_match(
    description: str, history: Iterable[Tuple[Optional[str], str]]
) -> Optional[CategorySuggestion]:
    """Best (description, category) pair from history with at least 50% similarity"""
    if not description or not description.strip():
        return None

    best = None
    highest = 0
    for past_description, category in history:
        if not past_description:
            continue
        similarity = description_similarity(description, past_description)
        if similarity > highest and similarity >= MIN_SIMILARITY:
            highest = similarity
            best = (past_description, category, similarity)

    if not best:
        return None

    past_description, category, similarity = best
    snippet = past_description[:50] + ("..." if len(past_description) > 50 else "")
    return CategorySuggestion(category=category, confidence=similarity, reason=f'Similar to: "{snippet}"')


class CategorySuggestionService:
    def __init__(self, db: Session):
        self.db = db

    def recent_descriptions(self, user_id, transaction_type: CategoryTypeEnum) -> List[Tuple[str, str]]:
        rows = self.db.query(Transaction.description, Transaction.category).filter(
            Transaction.user_id == user_id,
            Transaction.type == transaction_type,
            Transaction.description.isnot(None)
        ).order_by(Transaction.created_at.desc()).limit(HISTORY_LIMIT).all()
        return [(row.description, row.category) for row in rows]

    def resolve_category_id(self, user_id, suggestion: CategorySuggestion, transaction_type: CategoryTypeEnum):
        """Attach the id of the user's (custom first, then predefined) category carrying the suggested name"""
        category = self.db.query(Category).filter(
            Category.name == suggestion.category,
            Category.type == transaction_type,
            or_(Category.user_id == user_id, Category.is_predefined == True)
        ).order_by(Category.is_predefined.asc()).first()
        if category:
            suggestion.category_id = category.id
        return suggestion

    def suggest_category(
        self, user_id, description: str, transaction_type: CategoryTypeEnum
    ) -> CategorySuggestionResponse:
        keyword_match = suggest_by_keywords(description, transaction_type)
        if keyword_match and keyword_match.confidence >= CONFIDENT_KEYWORD_MATCH:
            return self._respond(user_id, keyword_match, SuggestionMethod.KEYWORD, transaction_type)

        try:
            history = self.recent_descriptions(user_id, transaction_type)
        except SQLAlchemyError:
            logger.exception(f"Error reading past transactions for user {user_id}")
            history = []

        historical_match = find_historical_match(description, history)
        if historical_match and (not keyword_match or historical_match.confidence > keyword_match.confidence):
            return self._respond(user_id, historical_match, SuggestionMethod.HISTORICAL, transaction_type)

        if keyword_match:
            return self._respond(user_id, keyword_match, SuggestionMethod.KEYWORD, transaction_type)

        logger.info(f"No category suggestion for: {description}")
        return CategorySuggestionResponse(suggestion=None, method=SuggestionMethod.NONE)

    def _respond(self, user_id, suggestion, method, transaction_type) -> CategorySuggestionResponse:
        try:
            suggestion = self.resolve_category_id(user_id, suggestion, transaction_type)
        except SQLAlchemyError:
            logger.exception(f"Error resolving suggested category {suggestion.category}")
        return CategorySuggestionResponse(suggestion=suggestion, method=method)
