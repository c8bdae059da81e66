"""API router - aggregates all endpoints.

Structure:
  /
    ├── /auth/*                 (register, login, refresh)
    ├── /tasks/*                (task CRUD and listing)
    ├── /users/{id}/tasks       (per-user listing)
    └── /allUsers, /deleteUser/{id}, /createUser
"""

from fastapi import APIRouter

from todo_api.auth import router as auth_router
from todo_api.tasks import router as tasks_router
from todo_api.users import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router.router)
api_router.include_router(tasks_router.router)
api_router.include_router(users_router.router)
