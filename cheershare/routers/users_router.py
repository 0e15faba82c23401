from fastapi import APIRouter

from ..deps import CurrentUser
from ..exceptions import create_success_response
from ..schemas import UserResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me")
def get_me(current_user: CurrentUser):
    return create_success_response(UserResponse.model_validate(current_user).model_dump(mode="json"))
