"""
Module 'payment_return' (feature-first): point d'entrée public.
Réunit le gestionnaire de callback passerelle, la bannière de succès, la garde
de matérialisation et l'exécuteur de tâches différées.
"""

from .callback import handle_payment_callback, check_pending_payment, parse_return_params, strip_query
from .notice import mount_success_notice, process_payment_return, continue_shopping, current_banner
from .service import verify_reference, complete_payment, PaymentVerificationError
from .guard import claim_reference, release_reference
from .deferred import DeferredRunner

__all__ = [
    # callback
    "handle_payment_callback",
    "check_pending_payment",
    "parse_return_params",
    "strip_query",
    # notice
    "mount_success_notice",
    "process_payment_return",
    "continue_shopping",
    "current_banner",
    # service
    "verify_reference",
    "complete_payment",
    "PaymentVerificationError",
    # guard
    "claim_reference",
    "release_reference",
    # deferred
    "DeferredRunner",
]
