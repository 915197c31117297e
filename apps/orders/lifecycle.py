"""
Delivery order state machine.

All status changes go through ``OrderLifecycle.authorize`` which checks, in
this order, the actor guard (AuthorizationError) and the source state
(StateConflictError). Nothing is written when either check fails.

    Registrado -> Aprovado -> Carregado -> Em Rota -> Entregue
    Registrado -> Cancelado (rejeição)
    Registrado|Aprovado -> Suspenso -> Aprovado | Cancelado (reprogramação)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, FrozenSet

from apps.companies.models import Company
from apps.core.exceptions import AuthorizationError, StateConflictError

from .models import OrderStatus

if TYPE_CHECKING:
    from apps.accounts.access import AccessContext

    from .models import DeliveryOrder


def is_destination_approver(order: 'DeliveryOrder', access: 'AccessContext') -> bool:
    return Company.objects.filter(cnpj=order.purchase_order.destination_cnpj, approver=access.user).exists()


def is_destination_member(order: 'DeliveryOrder', access: 'AccessContext') -> bool:
    return access.company is not None and access.company.cnpj == order.purchase_order.destination_cnpj


def is_supplier_member(order: 'DeliveryOrder', access: 'AccessContext') -> bool:
    return access.company is not None and access.company.pk == order.supplier_id


def _approver_guard(order, access):
    return access.is_super_admin or is_destination_approver(order, access)


def _destination_guard(order, access):
    return is_destination_member(order, access)


def _supplier_guard(order, access):
    return access.is_super_admin or is_supplier_member(order, access)


def _any_actor(order, access):
    return True


class Action(str, Enum):
    APPROVE = 'approve'
    REJECT = 'reject'
    LOAD_DOCUMENTS = 'load_documents'
    DISPATCH = 'dispatch'
    CONFIRM_ORDER_NUMBER = 'confirm_order_number'
    CONFIRM_DELIVERY = 'confirm_delivery'
    REQUEST_REPROGRAMMING = 'request_reprogramming'
    ACCEPT_REPROGRAMMING = 'accept_reprogramming'
    REJECT_REPROGRAMMING = 'reject_reprogramming'


@dataclass(frozen=True)
class TransitionRule:
    sources: FrozenSet[str]
    target: str
    guard: Callable
    denied_message: str
    conflict_message: str


S = OrderStatus

TRANSITIONS = {
    Action.APPROVE: TransitionRule(
        sources=frozenset({S.REGISTERED}),
        target=S.APPROVED,
        guard=_approver_guard,
        denied_message="Sem permissão para aprovar pedidos. Apenas o super administrador e aprovadores da obra de destino podem aprovar pedidos urgentes.",
        conflict_message="Pedido não pode ser aprovado. Status atual: {status}",
    ),
    Action.REJECT: TransitionRule(
        sources=frozenset({S.REGISTERED}),
        target=S.CANCELLED,
        guard=_approver_guard,
        denied_message="Sem permissão para rejeitar pedidos. Apenas o super administrador e aprovadores da obra de destino podem rejeitar pedidos urgentes.",
        conflict_message="Pedido não pode ser rejeitado. Status atual: {status}",
    ),
    Action.LOAD_DOCUMENTS: TransitionRule(
        sources=frozenset({S.APPROVED, S.LOADED}),
        target=S.LOADED,
        guard=_any_actor,
        denied_message="Sem permissão para enviar documentos",
        conflict_message="Documentos só podem ser enviados para pedidos aprovados. Status atual: {status}",
    ),
    Action.DISPATCH: TransitionRule(
        sources=frozenset({S.LOADED}),
        target=S.IN_TRANSIT,
        guard=_any_actor,
        denied_message="Sem permissão para despachar o pedido",
        conflict_message="Pedido só entra em rota após o carregamento. Status atual: {status}",
    ),
    Action.CONFIRM_ORDER_NUMBER: TransitionRule(
        sources=frozenset({S.APPROVED, S.LOADED}),
        target=S.IN_TRANSIT,
        guard=_any_actor,
        denied_message="Sem permissão para confirmar o número do pedido",
        conflict_message="Número do pedido só pode ser confirmado em pedidos aprovados. Status atual: {status}",
    ),
    Action.CONFIRM_DELIVERY: TransitionRule(
        sources=frozenset({S.IN_TRANSIT}),
        target=S.DELIVERED,
        guard=_any_actor,
        denied_message="Sem permissão para confirmar a entrega",
        conflict_message="Pedido não está em rota. Status atual: {status}",
    ),
    Action.REQUEST_REPROGRAMMING: TransitionRule(
        sources=frozenset({S.REGISTERED, S.APPROVED}),
        target=S.SUSPENDED,
        guard=_destination_guard,
        denied_message="Apenas a empresa de destino pode solicitar reprogramação",
        conflict_message="Reprogramação só pode ser solicitada para pedidos registrados ou aprovados. Status atual: {status}",
    ),
    Action.ACCEPT_REPROGRAMMING: TransitionRule(
        sources=frozenset({S.SUSPENDED}),
        target=S.APPROVED,
        guard=_supplier_guard,
        denied_message="Apenas o fornecedor pode aprovar reprogramações",
        conflict_message="Pedido não está suspenso para reprogramação",
    ),
    Action.REJECT_REPROGRAMMING: TransitionRule(
        sources=frozenset({S.SUSPENDED}),
        target=S.CANCELLED,
        guard=_supplier_guard,
        denied_message="Apenas o fornecedor pode rejeitar reprogramações",
        conflict_message="Pedido não está suspenso para reprogramação",
    ),
}


class OrderLifecycle:

    @staticmethod
    def rule(action: Action) -> TransitionRule:
        return TRANSITIONS[action]

    @staticmethod
    def can_transition(order: 'DeliveryOrder', action: Action) -> bool:
        return order.status in TRANSITIONS[action].sources

    @staticmethod
    def authorize(order: 'DeliveryOrder', action: Action, access: 'AccessContext') -> str:
        """Returns the target status or raises without touching the order."""
        rule = TRANSITIONS[action]
        if not rule.guard(order, access):
            raise AuthorizationError(rule.denied_message)
        if order.status not in rule.sources:
            raise StateConflictError(rule.conflict_message.format(status=order.status))
        return rule.target

    @staticmethod
    def allowed_actions(order: 'DeliveryOrder'):
        return [action for action, rule in TRANSITIONS.items() if order.status in rule.sources]
