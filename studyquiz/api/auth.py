from fastapi import APIRouter
from pydantic import Field

from studyquiz.api.common import CamelModel
from studyquiz.core.auth import create_token
from studyquiz.core.config import settings
from studyquiz.core.errors import NotFoundError

router = APIRouter()


class MockLogin(CamelModel):
    user_id: str = Field(min_length=1, max_length=255)


@router.post("/mock-login")
def mock_login(payload: MockLogin):
    if not settings.MOCK_LOGIN_ENABLED:
        raise NotFoundError("Not Found")
    token = create_token(payload.user_id)
    return {"access_token": token, "token_type": "bearer"}
