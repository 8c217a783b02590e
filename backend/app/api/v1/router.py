from fastapi import APIRouter
from app.api.v1.endpoints import auth, registration, invoice, hostels, staff, representatives

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(registration.router, prefix="/registration", tags=["Registration"])
api_router.include_router(invoice.router, prefix="/invoice", tags=["Invoices"])
api_router.include_router(hostels.router, prefix="/hostels", tags=["Hostels"])
api_router.include_router(staff.router, prefix="/staff", tags=["Staff"])
api_router.include_router(representatives.router, prefix="/representatives", tags=["Representatives"])
