from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.config import Settings
from storefront.core.errors import ForbiddenError, NotFoundError, UnauthorizedError
from storefront.db.models import Role, User
from storefront.services.categories import CategoryService
from storefront.services.orders import OrderService
from storefront.services.pagination import Page
from storefront.services.products import ProductService
from storefront.services.users import UserService

security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    db = request.app.state.session_factory()
    try: yield db
    finally: db.close()


def get_page(settings: Settings = Depends(get_settings)) -> Page:
    return Page(settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


def get_user_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings),
                     page: Page = Depends(get_page)) -> UserService:
    return UserService(db, settings, page)


def get_category_service(db: Session = Depends(get_db), page: Page = Depends(get_page)) -> CategoryService:
    return CategoryService(db, page)


def get_product_service(db: Session = Depends(get_db), page: Page = Depends(get_page)) -> ProductService:
    return ProductService(db, page)


def get_order_service(db: Session = Depends(get_db), page: Page = Depends(get_page)) -> OrderService:
    return OrderService(db, page)


def get_current_user(creds: HTTPAuthorizationCredentials = Depends(security),
                     users: UserService = Depends(get_user_service)) -> User:
    if not creds: raise UnauthorizedError('Authorization header is required')
    claims = users.validate_token(creds.credentials)
    try:
        return users.get(int(claims['user_id']))
    except NotFoundError:
        raise UnauthorizedError('User not found')


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.ADMIN:
        raise ForbiddenError('Admin access required')
    return user


def ensure_self_or_admin(user: User, owner_id: int) -> None:
    if user.role != Role.ADMIN and user.id != owner_id:
        raise ForbiddenError('You do not have permission to access this resource')
