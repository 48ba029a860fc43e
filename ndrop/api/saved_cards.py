"""Card book endpoints and the public business card lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ndrop.api._errors import to_http_error
from ndrop.domain.cards_service import CardBookService
from ndrop.infra.auth import AuthenticatedUser, get_current_user
from ndrop.schemas import dto

router = APIRouter(tags=["cards"])

_service = CardBookService()


@router.get("/api/user/saved-cards", response_model=dto.SavedCardsResponse)
async def list_saved_cards(user: AuthenticatedUser = Depends(get_current_user)) -> dto.SavedCardsResponse:
	try:
		cards = await _service.list_saved(user.id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SavedCardsResponse(user={"id": user.id, "email": user.email}, saved_cards=cards)


@router.post("/api/user/saved-cards", response_model=dto.SavedCardResponse)
async def collect_card(
	payload: dto.CollectCardRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.SavedCardResponse:
	try:
		edge = await _service.collect(user.id, payload.card_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SavedCardResponse(saved_card=edge)


@router.put("/api/user/saved-cards/{saved_card_id}", response_model=dto.SuccessResponse)
async def set_favorite(
	saved_card_id: str,
	payload: dto.FavoriteRequest,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.SuccessResponse:
	try:
		await _service.set_favorite(user.id, saved_card_id, payload.is_favorite)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SuccessResponse()


@router.delete("/api/user/saved-cards/{saved_card_id}", response_model=dto.SuccessResponse)
async def delete_saved_card(
	saved_card_id: str,
	user: AuthenticatedUser = Depends(get_current_user),
) -> dto.SuccessResponse:
	try:
		await _service.delete(user.id, saved_card_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.SuccessResponse()


@router.post("/api/user/clean-saved-cards", response_model=dto.CleanSavedCardsResponse)
async def clean_saved_cards(user: AuthenticatedUser = Depends(get_current_user)) -> dto.CleanSavedCardsResponse:
	try:
		removed = await _service.clean_own_cards(user.id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.CleanSavedCardsResponse(removed=removed)


@router.get("/api/business-cards/{card_id}", response_model=dto.BusinessCardResponse)
async def get_business_card(card_id: str) -> dto.BusinessCardResponse:
	try:
		card = await _service.get_public_card(card_id)
	except Exception as exc:
		raise to_http_error(exc) from exc
	return dto.BusinessCardResponse(card=card)
