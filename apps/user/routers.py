# user/routers.py
from fastapi import APIRouter
from utils.response_wrapper import response_wrapper
from .views import health, signup, login, refresh, logout

router = APIRouter()

router.get("/health")(health)
router.post("/signup")(response_wrapper(signup, 'Signup'))
router.post("/login")(response_wrapper(login, 'Login'))
router.post("/refresh")(response_wrapper(refresh, 'Refresh'))
router.post("/logout")(response_wrapper(logout, 'Logout'))
