from typing import Any, Callable, Dict, Type, TypeVar

from fastapi import Body, HTTPException, Request, status
from pydantic import ValidationError

from app.platform.auth import CurrentUser
from app.platform.exceptions import SignatureMismatchError
from app.platform.response import error_detail
from app.platform.signing import SignedDemand

D = TypeVar("D", bound=SignedDemand)


def signed_demand(demand_cls: Type[D]) -> Callable[..., D]:
    """
    Dependency factory: rebuild a demand from the JSON body and verify its
    signature before the route sees any of its fields.
    """

    async def dependency(payload: Dict[str, Any] = Body(...)) -> D:
        try:
            demand = demand_cls.from_payload(payload)
        except ValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=error_detail(
                    "Invalid request",
                    f"Missing or invalid parameters for {demand_cls.__name__}: {e.error_count()} error(s)",
                ),
            )

        if not demand.validate_signature():
            raise SignatureMismatchError(f"{demand_cls.__name__} signature mismatch")
        return demand

    return dependency


def assert_demand_matches_user(demand: SignedDemand, user: CurrentUser) -> None:
    """The demand must have been issued to this editor, in this workspace, for a language they may edit."""
    if demand.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("Invalid user", "This request was issued to a different user."),
        )
    if demand.workspace_id != user.workspace_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("Invalid workspace", "Switch to the workspace the request was issued for."),
        )
    if not user.check_language_access(demand.language_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("Invalid language", "You do not have access to this language."),
        )


def get_content_fetcher(request: Request):
    return request.app.state.content_fetcher

