# Clients module
from app.modules.clients.models import Client, Payment, ClientStatus, OCCUPATIONS

__all__ = ["Client", "Payment", "ClientStatus", "OCCUPATIONS"]
