from fastapi import APIRouter

from leavedesk.api.balances import balance_router
from leavedesk.api.employees import employees_router
from leavedesk.api.requests import leave_requests_router, leave_router

api_router = APIRouter()
api_router.include_router(leave_router)
api_router.include_router(leave_requests_router)
api_router.include_router(balance_router)
api_router.include_router(employees_router)
