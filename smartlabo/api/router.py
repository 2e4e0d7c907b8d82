# smartlabo/api/router.py
from fastapi import APIRouter
from smartlabo.api import (
    # Billing
    routes_invoices, )

api_router = APIRouter()

api_router.include_router(routes_invoices.router)
