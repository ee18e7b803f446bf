from datetime import datetime
from decimal import Decimal

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError

from app.models.category import Category, CategoryTypeEnum
from app.models.transaction import PaymentMethodEnum, Transaction, TransactionTypeEnum
from app.schemas.category import SuggestionMethod
from app.services.category_suggestion_service import (
    CategorySuggestionService,
    description_similarity,
    find_historical_match,
    suggest_by_keywords,
)


def past_expense(db, user, category, description):
    db.add(Transaction(
        user_id=user.id,
        type=TransactionTypeEnum.EXPENSE,
        amount=Decimal("12.50"),
        category=category.name,
        category_id=category.id,
        date=datetime(2025, 1, 10),
        description=description,
        payment_method=PaymentMethodEnum.CASH,
    ))
    db.commit()


def test_whole_word_keywords_build_confidence():
    suggestion = suggest_by_keywords("Lunch at the pizza restaurant", CategoryTypeEnum.EXPENSE)

    assert suggestion.category == "Food"
    assert suggestion.confidence == 100
    assert suggestion.reason == "Matched keywords: restaurant, lunch, pizza"


def test_single_whole_word_is_just_enough():
    suggestion = suggest_by_keywords("Dentist", CategoryTypeEnum.EXPENSE)

    assert suggestion.category == "Healthcare"
    assert suggestion.confidence == 50


def test_partial_matches_alone_are_not_a_suggestion():
    assert suggest_by_keywords("coffeeshop", CategoryTypeEnum.EXPENSE) is None
    assert suggest_by_keywords("   ", CategoryTypeEnum.EXPENSE) is None


def test_income_descriptions_use_income_keywords():
    suggestion = suggest_by_keywords("Monthly salary payroll", CategoryTypeEnum.INCOME)

    assert suggestion.category == "Salary"
    assert suggest_by_keywords("Monthly salary payroll", CategoryTypeEnum.EXPENSE) is None


def test_description_similarity_ignores_short_words():
    assert description_similarity("Farmers market haul", "Weekly farmers market haul") == 75
    assert description_similarity("a to b", "a to b") == 0


def test_historical_match_needs_half_the_words():
    history = [("Weekly farmers market haul", "Food"), ("Market research books", "Education"), (None, "Rent")]

    match = find_historical_match("farmers market haul", history)

    assert match.category == "Food"
    assert match.confidence == 75
    assert match.reason == 'Similar to: "Weekly farmers market haul"'
    assert find_historical_match("completely unrelated words", history) is None


def test_confident_keyword_match_resolves_category(db_session, user, food):
    result = CategorySuggestionService(db_session).suggest_category(
        user.id, "Dinner and coffee downtown", CategoryTypeEnum.EXPENSE
    )

    assert result.method == SuggestionMethod.KEYWORD
    assert result.suggestion.category_id == food.id


def test_history_is_used_when_keywords_fail(db_session, user, food):
    past_expense(db_session, user, food, "Weekly farmers market haul")

    result = CategorySuggestionService(db_session).suggest_category(
        user.id, "farmers market haul", CategoryTypeEnum.EXPENSE
    )

    assert result.method == SuggestionMethod.HISTORICAL
    assert result.suggestion.category == "Food"
    assert result.suggestion.category_id == food.id


def test_history_of_other_users_is_not_consulted(db_session, user, other_user, food):
    past_expense(db_session, other_user, food, "Weekly farmers market haul")

    result = CategorySuggestionService(db_session).suggest_category(
        user.id, "farmers market haul", CategoryTypeEnum.EXPENSE
    )

    assert result.method == SuggestionMethod.NONE
    assert result.suggestion is None


def test_custom_category_of_the_same_name_wins(db_session, user, food):
    custom = Category(user_id=user.id, name="Food", type=CategoryTypeEnum.EXPENSE, is_predefined=False)
    db_session.add(custom)
    db_session.commit()

    result = CategorySuggestionService(db_session).suggest_category(
        user.id, "Pizza dinner", CategoryTypeEnum.EXPENSE
    )

    assert result.suggestion.category_id == custom.id


def test_history_read_failure_falls_back_to_keywords(monkeypatch, db_session, user):
    def failing_history(self, *args, **kwargs):
        raise OperationalError("SELECT transactions", {}, Exception("database is locked"))

    monkeypatch.setattr(CategorySuggestionService, "recent_descriptions", failing_history)

    result = CategorySuggestionService(db_session).suggest_category(user.id, "Dentist", CategoryTypeEnum.EXPENSE)

    assert result.method == SuggestionMethod.KEYWORD
    assert result.suggestion.category == "Healthcare"


@pytest.mark.asyncio
async def test_suggestion_endpoint(client, auth_headers, db_session):
    transportation = db_session.query(Category).filter(
        Category.name == "Transportation", Category.is_predefined == True
    ).one()

    r = await client.post(
        "/api/v1/suggestions/category",
        json={"description": "Uber ride to the airport", "type": "EXPENSE"},
        headers=auth_headers,
    )

    assert r.status_code == status.HTTP_200_OK, r.text
    body = r.json()
    assert body["method"] == "keyword"
    assert body["suggestion"]["category"] == "Transportation"
    assert body["suggestion"]["category_id"] == str(transportation.id)


@pytest.mark.asyncio
async def test_suggestion_endpoint_validates_input(client, auth_headers):
    r = await client.post(
        "/api/v1/suggestions/category",
        json={"description": "", "type": "EXPENSE"},
        headers=auth_headers,
    )
    assert r.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    r = await client.post("/api/v1/suggestions/category", json={"description": "Pizza", "type": "EXPENSE"})
    assert r.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
