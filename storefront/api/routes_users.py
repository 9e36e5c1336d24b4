from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import ensure_self_or_admin, get_current_user, get_user_service, require_admin
from storefront.core import responses
from storefront.core.errors import ForbiddenError
from storefront.db.models import Role, User
from storefront.schemas import UserRead, UserUpdate
from storefront.services.users import UserService

router = APIRouter()


@router.get('')
def list_users(page: Optional[int] = None, per_page: Optional[int] = None,
               _: User = Depends(require_admin), users: UserService = Depends(get_user_service)):
    rows, total, page, per_page = users.list(page, per_page)
    return responses.paginated('Users retrieved successfully', [UserRead.model_validate(u) for u in rows],
                               page, per_page, total)


@router.get('/{user_id}')
def get_user(user_id: int, current: User = Depends(get_current_user),
             users: UserService = Depends(get_user_service)):
    ensure_self_or_admin(current, user_id)
    return responses.success('User retrieved successfully', UserRead.model_validate(users.get(user_id)))


@router.put('/{user_id}')
def update_user(user_id: int, payload: UserUpdate, current: User = Depends(get_current_user),
                users: UserService = Depends(get_user_service)):
    ensure_self_or_admin(current, user_id)
    if payload.role is not None and current.role != Role.ADMIN:
        raise ForbiddenError('Only admins can change roles')
    user = users.update(user_id, payload)
    return responses.success('User updated successfully', UserRead.model_validate(user))


@router.delete('/{user_id}')
def delete_user(user_id: int, current: User = Depends(get_current_user),
                users: UserService = Depends(get_user_service)):
    ensure_self_or_admin(current, user_id)
    users.delete(user_id)
    return responses.success('User deleted successfully')
