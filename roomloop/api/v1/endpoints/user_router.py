from fastapi import APIRouter, Depends

from roomloop.core.auth_dependencies import get_current_user
from roomloop.models.user import User
from roomloop.schemas.auth_schemas import UserEnvelope, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserEnvelope)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    Get current user info.
    :param current_user: Current authenticated user
    :return: User information
    """
    return UserEnvelope(user=UserResponse.model_validate(current_user))
