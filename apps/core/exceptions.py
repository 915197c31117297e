"""
Domain errors raised by the order and purchase-order services.

Each error carries the HTTP status the API layer answers with; the mapping
itself lives in apps.core.api.exceptions.
"""
from decimal import Decimal


class IcapError(Exception):
    status_code = 400
    default_message = "Erro na operação"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def as_payload(self):
        return {'success': False, 'message': self.message}


class ValidationError(IcapError):
    """Malformed or missing input."""
    status_code = 400
    default_message = "Dados inválidos"


class AuthorizationError(IcapError):
    """Actor lacks the role or relationship required for the action."""
    status_code = 403
    default_message = "Sem permissão para esta operação"


class StateConflictError(IcapError):
    """Transition attempted from a state outside its source set."""
    status_code = 409
    default_message = "Operação não permitida no status atual"


class NotFoundError(IcapError):
    status_code = 404
    default_message = "Registro não encontrado"


class InsufficientBalanceError(IcapError):
    status_code = 400

    def __init__(self, available, requested=None):
        self.available = Decimal(available)
        self.requested = requested
        super().__init__(f"Saldo insuficiente. Disponível: {self.available:.2f}")

    def as_payload(self):
        payload = super().as_payload()
        payload['available'] = str(self.available)
        return payload


class StorageError(IcapError):
    """Persistence failure. The message returned to clients is always generic."""
    status_code = 500
    default_message = "Erro interno ao acessar o banco de dados"
