from fastapi import APIRouter

from servicehub.api.employees import employees_router
from servicehub.api.expenses import expenses_router
from servicehub.api.leaves import leaves_router
from servicehub.api.notifications import notifications_router
from servicehub.api.search import search_router
from servicehub.api.tickets import tickets_router

api_router = APIRouter()
api_router.include_router(employees_router)
api_router.include_router(leaves_router)
api_router.include_router(expenses_router)
api_router.include_router(tickets_router)
api_router.include_router(notifications_router)
api_router.include_router(search_router)
