from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_current_user, get_user_service
from storefront.core import responses
from storefront.db.models import User
from storefront.schemas import LoginPayload, RegisterPayload, TokenRead, UserRead
from storefront.services.users import UserService

router = APIRouter()  # main.py mounts at /api/v1/auth


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, users: UserService = Depends(get_user_service)):
    user = users.register(payload)
    return responses.success('User registered successfully', UserRead.model_validate(user), status_code=201)


@router.post('/login')
def login(payload: LoginPayload, users: UserService = Depends(get_user_service)):
    token, user = users.login(str(payload.email), payload.password)
    return responses.success('Login successful', TokenRead(token=token, user=UserRead.model_validate(user)))


@router.get('/me')
def me(user: User = Depends(get_current_user)):
    return responses.success('User retrieved successfully', UserRead.model_validate(user))
