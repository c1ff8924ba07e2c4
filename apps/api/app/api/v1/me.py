from fastapi import APIRouter

from app.api.v1.schemas.users import MeOut, UserOut
from app.auth.deps import CurrentUser

router = APIRouter(tags=["me"])


@router.get("/user", response_model=MeOut)
@router.get("/me", response_model=MeOut)
def me(user: CurrentUser):
    return MeOut(user=UserOut.model_validate(user), is_authenticated=True)
