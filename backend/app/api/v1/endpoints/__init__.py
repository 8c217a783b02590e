# API endpoints
from . import auth, registration, invoice, hostels, staff, representatives

__all__ = ["auth", "registration", "invoice", "hostels", "staff", "representatives"]
